"""
One-shot session lifecycle around an aggregation run.

A session starts in Loading and moves exactly once to Loaded or Error.
Only the session's own run() writes the state; consumers read snapshots or
subscribe to transitions. Retrying means creating a new session.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from ..exceptions import AggregationError, SessionError
from ..models import GroupedResult
from .aggregator import CountryAggregator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Loaded:
    result: GroupedResult


@dataclass(frozen=True)
class Error:
    message: str


SessionState = Union[Loading, Loaded, Error]
StateListener = Callable[[SessionState], None]


def describe_failure(error: AggregationError) -> str:
    """User-facing text for a failed run."""
    return f"Failed to load data: {error.message}"


class CountrySession:
    """Observable Loading -> Loaded | Error state machine for one run."""

    def __init__(self, aggregator: Optional[CountryAggregator] = None) -> None:
        self._aggregator = aggregator or CountryAggregator()
        self._state: SessionState = Loading()
        self._listeners: List[StateListener] = []
        self._started = False
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SessionState:
        """Current state snapshot."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        return isinstance(self._state, (Loaded, Error))

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for state transitions.

        The listener is called once immediately with the current state, then
        on every transition. Returns a callable that removes the listener.
        If the first call raises, the listener is not registered.
        """
        listener(self._state)
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: SessionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session state listener failed")

    async def run(self) -> SessionState:
        """Run the aggregation once and publish the terminal state.

        Cancellation propagates without publishing anything, leaving the
        session in Loading.

        Raises:
            SessionError: If the session has already been run
        """
        if self._started:
            raise SessionError("Session has already been run; create a new session to retry")
        self._started = True

        try:
            result = await self._aggregator.aggregate()
        except AggregationError as e:
            self._publish(Error(describe_failure(e)))
        else:
            self._publish(Loaded(result))
        return self._state

    def start(self) -> asyncio.Task:
        """Schedule run() on the running loop and return its task."""
        if self._task is None:
            self._task = asyncio.create_task(self.run())
        return self._task

    def cancel(self) -> bool:
        """Cancel a run scheduled with start(). Returns False if nothing was cancelled."""
        if self._task is None or self._task.done():
            return False
        return self._task.cancel()
