"""Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Canned debate events in the service's wire format
- Helpers that turn events into SSE bodies
- Pytest configuration hooks
"""

import json
from collections.abc import Callable
from typing import Any

import pytest

from debate_stream import Message, Role


# =============================================================================
# SHARED FIXTURES - Available to all test modules
# =============================================================================


@pytest.fixture
def proposer_event() -> dict[str, Any]:
    """A PROPOSER turn as the service sends it."""
    return {
        "type": "ProposerResponse",
        "message": {
            "role": "PROPOSER",
            "content": "X",
            "model": "m1",
            "iteration": 1,
        },
    }


@pytest.fixture
def challenger_event() -> dict[str, Any]:
    """A CHALLENGER turn using the service's enum-constant spelling."""
    return {
        "type": "CHALLENGER_RESPONSE",
        "message": {
            "role": "CHALLENGER",
            "content": "Needs more evidence.",
            "model": "m2",
            "iteration": 1,
            "status": "ONGOING",
        },
    }


@pytest.fixture
def complete_event() -> dict[str, Any]:
    return {
        "type": "DebateComplete",
        "finalResponse": {
            "finalDraft": "D",
            "sources": ["s1"],
            "finalStatus": "DONE",
        },
    }


@pytest.fixture
def proposer_message() -> Message:
    """The Message the proposer_event fixture decodes to."""
    return Message(role=Role.PROPOSER, content="X", model="m1", iteration=1)


@pytest.fixture
def sse_body() -> Callable[..., bytes]:
    """Build an SSE response body from events.

    Dicts are JSON-encoded into ``data:`` lines; strings are written as-is,
    which lets a test inject comments or malformed lines.
    """

    def build(*events: dict[str, Any] | str) -> bytes:
        lines = []
        for event in events:
            if isinstance(event, str):
                lines.append(event)
            else:
                lines.append(f"data: {json.dumps(event)}")
        return ("\n".join(lines) + "\n").encode("utf-8")

    return build


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
