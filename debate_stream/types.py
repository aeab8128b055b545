"""Shared enums for the debate stream consumer."""

from enum import Enum


class Role(Enum):
    """Debate participant roles."""

    PROPOSER = "PROPOSER"
    CHALLENGER = "CHALLENGER"


class EventType(Enum):
    """Event types emitted by the debate service."""

    DEBATE_START = "DebateStart"
    ITERATION_START = "IterationStart"
    PROPOSER_RESPONSE = "ProposerResponse"
    CHALLENGER_RESPONSE = "ChallengerResponse"
    DEBATE_COMPLETE = "DebateComplete"
    ERROR = "Error"

    @classmethod
    def from_wire(cls, value: object) -> "EventType | None":
        """Resolve a ``type`` discriminator, accepting enum-constant spellings.

        The service serializes its enum constants (``PROPOSER_RESPONSE``)
        while newer producers use the PascalCase names (``ProposerResponse``).
        Returns None for anything unrecognized.
        """
        if not isinstance(value, str):
            return None
        for event_type in cls:
            if value == event_type.value or value == event_type.name:
                return event_type
        return None


class SessionPhase(Enum):
    """Lifecycle phases of one debate run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class DirectiveKind(Enum):
    """Side effects the host should surface to the user."""

    ALERT = "alert"
    DECODE_ERROR = "decodeError"
