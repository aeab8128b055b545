"""Client for the DuoDebate API and the host-side debate session."""

from .client import DuoDebateClient
from .schemas import DebateRequest, DebateResult, ModelInfo
from .session import DebateSession, SessionUpdate, UpdateListener

__all__ = [
    "DuoDebateClient",
    "DebateRequest",
    "DebateResult",
    "ModelInfo",
    "DebateSession",
    "SessionUpdate",
    "UpdateListener",
]
