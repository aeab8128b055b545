"""Decoding of frame payloads and the debate session state machine."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from .exceptions import EventDecodeError
from .models import (
    EVENT_MODELS,
    ChallengerResponse,
    DebateComplete,
    DebateEvent,
    Directive,
    ErrorEvent,
    Frame,
    ProposerResponse,
    SessionState,
    StreamCancelled,
    StreamClosed,
    UnknownEvent,
)
from .types import EventType, SessionPhase

logger = logging.getLogger(__name__)

STREAM_ENDED_ERROR = "Debate stream ended before completion"
CANCELLED_ERROR = "Debate cancelled"
UNKNOWN_ERROR = "Unknown error"


def decode_event(payload: str) -> DebateEvent:
    """Decode a frame payload into a typed debate event.

    Args:
        payload: JSON text following the ``data:`` prefix

    Returns:
        The matching event model, or ``UnknownEvent`` when the ``type``
        discriminator is not recognized

    Raises:
        EventDecodeError: The payload is not a JSON object or a known event
            is missing required fields
    """
    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError as e:
        raise EventDecodeError(f"Invalid JSON in frame: {e}", payload) from e

    if not isinstance(data, dict):
        raise EventDecodeError(
            f"Expected a JSON object, got {type(data).__name__}", payload
        )

    event_type = EventType.from_wire(data.get("type"))
    if event_type is None:
        return UnknownEvent(raw=data)

    try:
        return EVENT_MODELS[event_type].model_validate(data)
    except ValidationError as e:
        raise EventDecodeError(
            f"Invalid {event_type.value} event: {e.error_count()} validation error(s)",
            payload,
        ) from e


def begin_session(prompt: str | None = None) -> SessionState:
    """Fresh running state for a new submission."""
    return SessionState(phase=SessionPhase.RUNNING, prompt=prompt)


def apply(state: SessionState, event: DebateEvent) -> tuple[SessionState, Directive | None]:
    """Fold one event into the session state.

    Only a running session reacts to events; once a run is complete or
    failed, late and duplicate frames leave it untouched.
    """
    if not state.is_running:
        return state, None

    if isinstance(event, (ProposerResponse, ChallengerResponse)):
        if event.message is None:
            return state, None
        return state.model_copy(update={"transcript": state.transcript + (event.message,)}), None

    if isinstance(event, DebateComplete):
        update: dict[str, Any] = {"phase": SessionPhase.COMPLETE}
        final = event.final_response
        if final is not None:
            update.update(
                final_draft=final.final_draft,
                sources=final.sources,
                status=final.final_status,
            )
        return state.model_copy(update=update), None

    if isinstance(event, ErrorEvent):
        error = event.error or UNKNOWN_ERROR
        transcript = state.transcript
        if event.message is not None:
            transcript = transcript + (event.message,)
        return (
            state.model_copy(
                update={
                    "phase": SessionPhase.FAILED,
                    "transcript": transcript,
                    "last_error": error,
                }
            ),
            Directive.alert(error),
        )

    if isinstance(event, StreamClosed):
        failed = state.model_copy(
            update={
                "phase": SessionPhase.FAILED,
                "last_error": event.error or STREAM_ENDED_ERROR,
            }
        )
        return failed, Directive.alert(event.error) if event.error else None

    if isinstance(event, StreamCancelled):
        return (
            state.model_copy(
                update={"phase": SessionPhase.FAILED, "last_error": CANCELLED_ERROR}
            ),
            None,
        )

    # DebateStart, IterationStart and UnknownEvent are informational
    return state, None


class EventReducer:
    """Owns the state of one debate run and folds frames into it."""

    def __init__(self, state: SessionState | None = None):
        self.state = state or SessionState()

    def start(self, prompt: str | None = None) -> SessionState:
        """Reset to a fresh running session, discarding any previous run."""
        self.state = begin_session(prompt)
        return self.state

    def consume(self, frame: Frame) -> list[Directive]:
        """Decode a frame and fold it. Decode failures never end the run."""
        if not self.state.is_running:
            logger.debug(f"Ignoring frame after session ended: {frame.payload[:100]}")
            return []

        try:
            event = decode_event(frame.payload)
        except EventDecodeError as e:
            logger.warning(f"Skipping undecodable frame: {e} ({e.raw[:100]})")
            return [Directive.decode_error(e.raw, str(e))]

        if isinstance(event, UnknownEvent):
            logger.info(f"Unknown event type: {event.raw.get('type')}")
        return self.dispatch(event)

    def dispatch(self, event: DebateEvent) -> list[Directive]:
        """Fold an already-decoded event."""
        self.state, directive = apply(self.state, event)
        if isinstance(event, ErrorEvent) and directive is not None:
            logger.error(f"Debate error: {directive.message}")
        return [directive] if directive is not None else []

    def end_stream(self, error: str | None = None) -> list[Directive]:
        """Signal that the transport closed, optionally because it failed."""
        if self.state.is_running:
            if error:
                logger.error(f"Debate stream failed: {error}")
            else:
                logger.warning("Debate stream closed without a terminal event")
        return self.dispatch(StreamClosed(error=error))

    def cancel(self) -> list[Directive]:
        """Abort the run. Calling this on a finished run does nothing."""
        return self.dispatch(StreamCancelled())
