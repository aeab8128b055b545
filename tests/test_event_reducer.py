"""Tests for event decoding and the session state machine."""

import json
from typing import Any

import pytest

from debate_stream import (
    ChallengerResponse,
    DebateComplete,
    DebateStart,
    Directive,
    DirectiveKind,
    ErrorEvent,
    EventDecodeError,
    EventReducer,
    Frame,
    IterationStart,
    Message,
    ProposerResponse,
    Role,
    SessionPhase,
    SessionState,
    StreamCancelled,
    StreamClosed,
    UnknownEvent,
    apply,
    begin_session,
    decode_event,
)


def frame(event: dict[str, Any]) -> Frame:
    return Frame(payload=json.dumps(event))


# =============================================================================
# DECODING
# =============================================================================


def test_decode_proposer_response(proposer_event: dict[str, Any], proposer_message: Message) -> None:
    event = decode_event(json.dumps(proposer_event))

    assert isinstance(event, ProposerResponse)
    assert event.message == proposer_message


def test_decode_accepts_enum_constant_spelling(challenger_event: dict[str, Any]) -> None:
    event = decode_event(json.dumps(challenger_event))

    assert isinstance(event, ChallengerResponse)
    assert event.message is not None
    assert event.message.role is Role.CHALLENGER
    assert event.message.status == "ONGOING"


@pytest.mark.parametrize(
    ("payload", "expected_type"),
    [
        ('{"type":"DebateStart"}', DebateStart),
        ('{"type":"DEBATE_START","message":null,"error":null}', DebateStart),
        ('{"type":"ITERATION_START"}', IterationStart),
        ('{"type":"IterationStart","iteration":3}', IterationStart),
        ('{"type":"DEBATE_COMPLETE","finalResponse":null}', DebateComplete),
        ('{"type":"ERROR","error":"boom"}', ErrorEvent),
    ],
)
def test_decode_selects_variant_by_type(payload: str, expected_type: type) -> None:
    assert isinstance(decode_event(payload), expected_type)


def test_decode_final_response_defaults_sources() -> None:
    event = decode_event(
        '{"type":"DebateComplete","finalResponse":'
        '{"finalDraft":"D","sources":null,"finalStatus":"READY","totalIterations":2}}'
    )

    assert isinstance(event, DebateComplete)
    assert event.final_response is not None
    assert event.final_response.sources == ()
    assert event.final_response.total_iterations == 2


def test_unrecognized_type_is_unknown_not_error() -> None:
    event = decode_event('{"type":"JudgeVerdict","score":7}')

    assert isinstance(event, UnknownEvent)
    assert event.raw == {"type": "JudgeVerdict", "score": 7}


def test_missing_type_is_unknown() -> None:
    assert isinstance(decode_event('{"hello":"world"}'), UnknownEvent)


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "",
        "[1, 2, 3]",
        '"DebateStart"',
        '{"type":"ProposerResponse","message":{"role":"JUDGE","content":"x","model":"m","iteration":1}}',
        '{"type":"ProposerResponse","message":{"role":"PROPOSER"}}',
        '{"type":"IterationStart","iteration":0}',
        '{"type":"DebateComplete","finalResponse":{"sources":[]}}',
    ],
)
def test_decode_rejects_malformed_payloads(payload: str) -> None:
    with pytest.raises(EventDecodeError) as exc_info:
        decode_event(payload)

    assert exc_info.value.raw == payload


# =============================================================================
# FOLD
# =============================================================================


def test_begin_session_starts_fresh_run() -> None:
    state = begin_session("Outline a blog post")

    assert state.phase is SessionPhase.RUNNING
    assert state.is_running is True
    assert state.prompt == "Outline a blog post"
    assert state.transcript == ()
    assert state.final_draft is None


def test_idle_state_ignores_events(proposer_message: Message) -> None:
    idle = SessionState()

    state, directive = apply(idle, ProposerResponse(message=proposer_message))

    assert state is idle
    assert directive is None


@pytest.mark.parametrize(
    "event",
    [
        DebateStart(),
        IterationStart(iteration=2),
        UnknownEvent(raw={"type": "Whatever"}),
        ProposerResponse(message=None),
        ChallengerResponse(message=None),
    ],
)
def test_informational_events_leave_state_unchanged(event: Any) -> None:
    running = begin_session("p")

    state, directive = apply(running, event)

    assert state == running
    assert directive is None


def test_responses_append_in_arrival_order(proposer_message: Message) -> None:
    critique = Message(role=Role.CHALLENGER, content="Y", model="m2", iteration=1)
    state = begin_session("p")

    state, _ = apply(state, ProposerResponse(message=proposer_message))
    state, _ = apply(state, ChallengerResponse(message=critique))

    assert state.transcript == (proposer_message, critique)
    assert state.is_running is True


def test_fold_returns_new_state_without_mutating_previous(proposer_message: Message) -> None:
    before = begin_session("p")

    after, _ = apply(before, ProposerResponse(message=proposer_message))

    assert before.transcript == ()
    assert after.transcript == (proposer_message,)


def test_error_event_appends_message_and_alerts() -> None:
    failing = Message(role=Role.PROPOSER, content="Error: quota", model="m1", iteration=2, status="ERROR")

    state, directive = apply(begin_session("p"), ErrorEvent(error="quota", message=failing))

    assert state.phase is SessionPhase.FAILED
    assert state.transcript == (failing,)
    assert state.last_error == "quota"
    assert directive == Directive.alert("quota")


def test_error_event_without_text_uses_generic_error() -> None:
    state, directive = apply(begin_session("p"), ErrorEvent())

    assert state.last_error == "Unknown error"
    assert directive is not None and directive.kind is DirectiveKind.ALERT


def test_stream_closed_without_terminal_event_fails_quietly() -> None:
    state, directive = apply(begin_session("p"), StreamClosed())

    assert state.is_running is False
    assert state.phase is SessionPhase.FAILED
    assert state.last_error == "Debate stream ended before completion"
    assert directive is None


def test_transport_failure_fails_with_alert() -> None:
    state, directive = apply(begin_session("p"), StreamClosed(error="connection reset"))

    assert state.last_error == "connection reset"
    assert directive == Directive.alert("connection reset")


def test_cancellation_fails_run() -> None:
    state, directive = apply(begin_session("p"), StreamCancelled())

    assert state.phase is SessionPhase.FAILED
    assert state.last_error == "Debate cancelled"
    assert directive is None


@pytest.mark.parametrize(
    "late_event",
    [
        DebateComplete.model_validate(
            {"finalResponse": {"finalDraft": "other", "finalStatus": "READY"}}
        ),
        ErrorEvent(error="late"),
        StreamClosed(error="late"),
        StreamCancelled(),
    ],
)
def test_terminal_states_ignore_late_events(late_event: Any, complete_event: dict[str, Any]) -> None:
    completed, _ = apply(begin_session("p"), decode_event(json.dumps(complete_event)))

    state, directive = apply(completed, late_event)

    assert state is completed
    assert directive is None


# =============================================================================
# REDUCER
# =============================================================================


def test_proposer_then_complete_scenario(
    proposer_event: dict[str, Any], complete_event: dict[str, Any], proposer_message: Message
) -> None:
    reducer = EventReducer()
    reducer.start("Outline a blog post")

    assert reducer.consume(frame(proposer_event)) == []
    assert reducer.consume(frame(complete_event)) == []

    state = reducer.state
    assert state.transcript == (proposer_message,)
    assert state.final_draft == "D"
    assert state.sources == ("s1",)
    assert state.status == "DONE"
    assert state.is_running is False
    assert state.phase is SessionPhase.COMPLETE


def test_duplicate_complete_is_idempotent(complete_event: dict[str, Any]) -> None:
    reducer = EventReducer()
    reducer.start("p")
    reducer.consume(frame(complete_event))
    completed = reducer.state

    assert reducer.consume(frame(complete_event)) == []
    assert reducer.state is completed


def test_error_frame_scenario() -> None:
    reducer = EventReducer()
    reducer.start("p")

    directives = reducer.consume(Frame(payload='{"type":"Error","error":"timeout"}'))

    assert reducer.state.is_running is False
    assert reducer.state.last_error == "timeout"
    assert reducer.state.transcript == ()
    assert directives == [Directive.alert("timeout")]


def test_malformed_frame_reports_and_continues(proposer_event: dict[str, Any]) -> None:
    reducer = EventReducer()
    reducer.start("p")
    reducer.consume(frame(proposer_event))
    before = reducer.state

    directives = reducer.consume(Frame(payload="{not json"))

    assert reducer.state is before
    assert reducer.state.is_running is True
    assert len(directives) == 1
    assert directives[0].kind is DirectiveKind.DECODE_ERROR
    assert directives[0].raw == "{not json"


def test_unknown_event_produces_no_directive() -> None:
    reducer = EventReducer()
    reducer.start("p")

    assert reducer.consume(Frame(payload='{"type":"Heartbeat"}')) == []
    assert reducer.state.is_running is True


def test_stream_end_after_proposer_keeps_transcript(
    proposer_event: dict[str, Any], proposer_message: Message
) -> None:
    reducer = EventReducer()
    reducer.start("p")
    reducer.consume(frame(proposer_event))

    assert reducer.end_stream() == []

    assert reducer.state.is_running is False
    assert reducer.state.last_error == "Debate stream ended before completion"
    assert reducer.state.transcript == (proposer_message,)


def test_cancel_is_idempotent() -> None:
    reducer = EventReducer()
    reducer.start("p")

    reducer.cancel()
    cancelled = reducer.state
    assert reducer.cancel() == []
    assert reducer.end_stream(error="late") == []
    assert reducer.state is cancelled


def test_frames_after_termination_are_ignored(complete_event: dict[str, Any]) -> None:
    reducer = EventReducer()
    reducer.start("p")
    reducer.end_stream(error="boom")
    failed = reducer.state

    assert reducer.consume(frame(complete_event)) == []
    assert reducer.consume(Frame(payload="garbage")) == []
    assert reducer.state is failed


def test_start_resets_previous_run(proposer_event: dict[str, Any]) -> None:
    reducer = EventReducer()
    reducer.start("first")
    reducer.consume(frame(proposer_event))
    reducer.consume(Frame(payload='{"type":"Error","error":"x"}'))

    state = reducer.start("second")

    assert state.prompt == "second"
    assert state.transcript == ()
    assert state.last_error is None
    assert state.is_running is True
