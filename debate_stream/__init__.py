"""Streaming consumer for DuoDebate event streams."""

from .exceptions import DebateTransportError, EventDecodeError
from .framer import StreamFramer
from .models import (
    ChallengerResponse,
    DebateComplete,
    DebateEvent,
    DebateStart,
    Directive,
    ErrorEvent,
    FinalResponse,
    Frame,
    IterationStart,
    Message,
    ProposerResponse,
    SessionState,
    StreamCancelled,
    StreamClosed,
    UnknownEvent,
)
from .reducer import EventReducer, apply, begin_session, decode_event
from .types import DirectiveKind, EventType, Role, SessionPhase

__all__ = [
    "StreamFramer",
    "EventReducer",
    "apply",
    "begin_session",
    "decode_event",
    "Frame",
    "Message",
    "FinalResponse",
    "DebateEvent",
    "DebateStart",
    "IterationStart",
    "ProposerResponse",
    "ChallengerResponse",
    "DebateComplete",
    "ErrorEvent",
    "UnknownEvent",
    "StreamClosed",
    "StreamCancelled",
    "Directive",
    "SessionState",
    "DirectiveKind",
    "EventType",
    "Role",
    "SessionPhase",
    "EventDecodeError",
    "DebateTransportError",
]
