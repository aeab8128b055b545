"""Host-side consumer that drives one debate run at a time."""

import asyncio
import itertools
import logging
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Iterable
from dataclasses import dataclass
from typing import TypeAlias

from debate_stream.exceptions import DebateTransportError
from debate_stream.framer import StreamFramer
from debate_stream.models import Directive, SessionState
from debate_stream.reducer import EventReducer

from .client import DuoDebateClient
from .schemas import DebateRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUpdate:
    """A state snapshot plus the directives produced by the fold."""

    state: SessionState
    directives: tuple[Directive, ...] = ()


UpdateListener: TypeAlias = Callable[[SessionUpdate], None]


class DebateSession:
    """Runs debates against the service and publishes their state.

    Only one run is current at a time. Starting a new run supersedes the
    previous one: it stops before its next update and never opens a stream
    it has not opened yet.
    """

    def __init__(self, client: DuoDebateClient):
        self._client = client
        self.state = SessionState()
        self._listeners: list[UpdateListener] = []
        self._run_ids = itertools.count(1)
        self._current_run = 0
        self._task: asyncio.Task[SessionState] | None = None
        self._updates: AsyncGenerator[SessionUpdate, None] | None = None

    def add_listener(self, listener: UpdateListener) -> None:
        """Register a callback invoked with every published update."""
        self._listeners.append(listener)

    def remove_listener(self, listener: UpdateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _is_current(self, run_id: int) -> bool:
        return run_id == self._current_run

    def _publish(
        self, run_id: int, state: SessionState, directives: Iterable[Directive] = ()
    ) -> SessionUpdate:
        """Commit a snapshot if the run is still current and notify listeners."""
        update = SessionUpdate(state=state, directives=tuple(directives))
        if not self._is_current(run_id):
            return update

        self.state = state
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")
        return update

    async def updates(
        self, prompt: str, max_rounds: int = 10
    ) -> AsyncGenerator[SessionUpdate, None]:
        """Run a debate and yield an update after every state transition.

        The first update is the fresh running state; the last one is
        terminal. Closing the iterator early aborts the run, which then
        ends as failed.

        Raises:
            pydantic.ValidationError: The prompt is blank or max_rounds is
                outside 1..20 (raised before any state changes)
        """
        request = DebateRequest(prompt=prompt, max_iterations=max_rounds)
        run_id = next(self._run_ids)
        self._current_run = run_id

        reducer = EventReducer()
        framer = StreamFramer()
        reducer.start(request.prompt)

        directives: list[Directive] = []
        try:
            yield self._publish(run_id, reducer.state)
            if not self._is_current(run_id):
                logger.info(f"Debate run {run_id} superseded before its stream opened")
                return

            async with self._client.stream_debate(
                request.prompt, request.max_iterations
            ) as chunks:
                async for chunk in chunks:
                    if not self._is_current(run_id):
                        logger.info(f"Debate run {run_id} superseded, closing its stream")
                        return

                    for frame in framer.feed(chunk):
                        if not self._is_current(run_id):
                            logger.info(f"Debate run {run_id} superseded, closing its stream")
                            return
                        frame_directives = reducer.consume(frame)
                        yield self._publish(run_id, reducer.state, frame_directives)
                        if reducer.state.is_terminal:
                            logger.info(
                                f"Debate run {run_id} finished: {reducer.state.phase.value}"
                            )
                            return

                for frame in framer.finish():
                    if not self._is_current(run_id):
                        return
                    frame_directives = reducer.consume(frame)
                    yield self._publish(run_id, reducer.state, frame_directives)
                    if reducer.state.is_terminal:
                        return

            directives = reducer.end_stream()
        except DebateTransportError as e:
            directives = reducer.end_stream(error=str(e))
        except Exception as e:
            directives = reducer.end_stream(error=str(e) or type(e).__name__)
            self._publish(run_id, reducer.state, directives)
            raise
        finally:
            if reducer.state.is_running:
                # Closed by the consumer or cancelled while awaiting data
                logger.info(f"Debate run {run_id} aborted")
                reducer.cancel()
                self._publish(run_id, reducer.state)

        if self._is_current(run_id):
            yield self._publish(run_id, reducer.state, directives)

    async def submit(
        self, prompt: str, max_rounds: int = 10
    ) -> asyncio.Task[SessionState]:
        """Start a debate in the background, replacing any active run.

        The fresh running state is published before this returns.
        """
        await self.cancel()

        updates = self.updates(prompt, max_rounds)
        await anext(updates)
        self._updates = updates
        self._task = asyncio.create_task(self._drain(updates))
        return self._task

    async def _drain(self, updates: AsyncIterator[SessionUpdate]) -> SessionState:
        last = self.state
        async for update in updates:
            last = update.state
        return last

    async def cancel(self) -> None:
        """Abort the active run. Does nothing if no run is active."""
        task, updates = self._task, self._updates
        self._task, self._updates = None, None

        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.info("Debate task cancelled successfully")

        # A task cancelled before its first step never entered the iterator
        if updates is not None:
            await updates.aclose()

    async def wait(self) -> SessionState:
        """Wait for the active run to end and return the latest state."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})
            if not task.cancelled() and task.exception() is not None:
                logger.error(f"Debate run failed unexpectedly: {task.exception()!r}")
        return self.state
