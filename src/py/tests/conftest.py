"""
conftest.py — Shared schemas and conversations for the test suite.

pyproject.toml puts src/py/ on sys.path, so tests import the
structured_generation package directly without installing it.
"""

from __future__ import annotations

import pytest

from structured_generation import Message, MessageRole


USER_SCHEMA = {
    "type": "object",
    "required": ["name", "age", "active"],
    "properties": {
        "name": {"type": "string"},
        "age": {"type": "number"},
        "active": {"type": "boolean"},
    },
}


@pytest.fixture
def user_schema() -> dict:
    return USER_SCHEMA


@pytest.fixture
def conversation() -> list[Message]:
    return [
        Message(MessageRole.SYSTEM, "You are a helpful assistant."),
        Message(MessageRole.USER, "Describe a user."),
    ]
