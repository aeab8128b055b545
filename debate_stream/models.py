"""Data models for the debate stream consumer.

Wire models mirror the JSON the debate service emits (camelCase aliases),
while ``SessionState`` is the immutable client-side view folded from them.
"""

from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .types import DirectiveKind, EventType, Role, SessionPhase


@dataclass(frozen=True)
class Frame:
    """One ``data:`` line extracted from the stream."""

    payload: str


class Message(BaseModel):
    """A single turn in the debate transcript."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    model: str
    iteration: int
    status: str | None = None  # ONGOING, READY or ERROR


class FinalResponse(BaseModel):
    """Outcome of a completed debate."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    final_draft: str = Field(..., alias="finalDraft")
    sources: tuple[str, ...] = ()
    final_status: str = Field(..., alias="finalStatus")
    prompt: str | None = None
    total_iterations: int | None = Field(default=None, alias="totalIterations")
    transcript: tuple[Message, ...] = ()

    @field_validator("sources", "transcript", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """The service serializes empty collections as null."""
        return () if v is None else v


# =============================================================================
# EVENTS
# =============================================================================


class DebateStart(BaseModel):
    """The service accepted the request and the debate is starting."""

    model_config = ConfigDict(frozen=True)
    event_type: ClassVar[EventType] = EventType.DEBATE_START


class IterationStart(BaseModel):
    """A new round is starting."""

    model_config = ConfigDict(frozen=True)
    event_type: ClassVar[EventType] = EventType.ITERATION_START

    iteration: Annotated[int, Field(ge=1)] | None = None


class ProposerResponse(BaseModel):
    """The proposer produced a draft or revision."""

    model_config = ConfigDict(frozen=True)
    event_type: ClassVar[EventType] = EventType.PROPOSER_RESPONSE

    message: Message | None = None


class ChallengerResponse(BaseModel):
    """The challenger produced a critique."""

    model_config = ConfigDict(frozen=True)
    event_type: ClassVar[EventType] = EventType.CHALLENGER_RESPONSE

    message: Message | None = None


class DebateComplete(BaseModel):
    """The debate finished and carries the final draft."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)
    event_type: ClassVar[EventType] = EventType.DEBATE_COMPLETE

    final_response: FinalResponse | None = Field(default=None, alias="finalResponse")


class ErrorEvent(BaseModel):
    """The service aborted the debate."""

    model_config = ConfigDict(frozen=True)
    event_type: ClassVar[EventType] = EventType.ERROR

    error: str | None = None
    message: Message | None = None


class UnknownEvent(BaseModel):
    """An event with an unrecognized ``type``; folded as a no-op."""

    model_config = ConfigDict(frozen=True)

    raw: dict[str, Any]


class StreamClosed(BaseModel):
    """The transport ended, either naturally (no error) or by failure."""

    model_config = ConfigDict(frozen=True)

    error: str | None = None


class StreamCancelled(BaseModel):
    """The host aborted the transport."""

    model_config = ConfigDict(frozen=True)


WireEvent: TypeAlias = (
    DebateStart
    | IterationStart
    | ProposerResponse
    | ChallengerResponse
    | DebateComplete
    | ErrorEvent
)
DebateEvent: TypeAlias = WireEvent | UnknownEvent | StreamClosed | StreamCancelled

EVENT_MODELS: dict[EventType, type[WireEvent]] = {
    EventType.DEBATE_START: DebateStart,
    EventType.ITERATION_START: IterationStart,
    EventType.PROPOSER_RESPONSE: ProposerResponse,
    EventType.CHALLENGER_RESPONSE: ChallengerResponse,
    EventType.DEBATE_COMPLETE: DebateComplete,
    EventType.ERROR: ErrorEvent,
}


# =============================================================================
# CLIENT STATE
# =============================================================================


class Directive(BaseModel):
    """A side effect the host should surface, produced alongside a fold."""

    model_config = ConfigDict(frozen=True)

    kind: DirectiveKind
    message: str
    raw: str | None = None

    @classmethod
    def alert(cls, message: str) -> "Directive":
        return cls(kind=DirectiveKind.ALERT, message=message)

    @classmethod
    def decode_error(cls, raw: str, message: str) -> "Directive":
        return cls(kind=DirectiveKind.DECODE_ERROR, message=message, raw=raw)


class SessionState(BaseModel):
    """Everything the host displays for one debate run.

    Instances are never mutated; each fold returns a new one so observers
    always see a consistent record.
    """

    model_config = ConfigDict(frozen=True)

    phase: SessionPhase = SessionPhase.IDLE
    prompt: str | None = None
    transcript: tuple[Message, ...] = ()
    final_draft: str | None = None
    sources: tuple[str, ...] = ()
    status: str | None = None
    last_error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_running(self) -> bool:
        return self.phase is SessionPhase.RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.phase in (SessionPhase.COMPLETE, SessionPhase.FAILED)
