"""Fetch-state machine owned by each view.

A FetchSite runs one logical fetch chain at a time. Starting a new chain
cancels the previous one and bumps a generation counter; a chain only
writes its result if its generation is still current, so a superseded
invocation can never overwrite newer data regardless of completion order.

States: idle -> loading -> ready | error. Cancellation returns the site to
ready (if it holds a value) or idle, without touching value or error.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from enum import Enum
from functools import partial
from typing import Any, Generic, TypeVar

from crypto_tracker.exceptions import TrackerError
from crypto_tracker.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

GENERIC_ERROR_MESSAGE = "Unexpected error while fetching data"


class FetchStatus(str, Enum):
    """Lifecycle status of a fetch site."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class FetchState(Generic[T]):
    """Immutable snapshot of a fetch site.

    ``value`` is the last successful result and may be stale while a refresh
    is loading. ``params`` identifies the invocation that produced the state.
    """

    status: FetchStatus = FetchStatus.IDLE
    value: T | None = None
    error: str | None = None
    error_code: str | None = None
    params: Any = None
    updated_at: float | None = None  # Unix seconds of the last success

    @property
    def loading(self) -> bool:
        return self.status is FetchStatus.LOADING

    @property
    def failed(self) -> bool:
        return self.status is FetchStatus.ERROR


class FetchSite(Generic[T]):
    """Runs fetch chains for one view and exposes their state.

    Args:
        name: Used in log events to tell sites apart.
        keep_value_on_error: When False, a failed chain clears the last value
            so the view cannot show data for a different request.
    """

    def __init__(self, name: str, keep_value_on_error: bool = True) -> None:
        self._name = name
        self._keep_value_on_error = keep_value_on_error
        self._state: FetchState[T] = FetchState()
        self._generation = 0
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]

    @property
    def state(self) -> FetchState[T]:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def trigger(
        self, fetch: Callable[[], Awaitable[T]], params: Any = None
    ) -> asyncio.Task:  # type: ignore[type-arg]
        """Start a new chain, superseding any chain still in flight."""
        self._generation += 1
        generation = self._generation

        previous = self._task
        if previous is not None and not previous.done():
            previous.cancel()
            logger.debug(
                "fetch_superseded", site=self._name, generation=generation - 1
            )

        self._state = replace(
            self._state,
            status=FetchStatus.LOADING,
            error=None,
            error_code=None,
            params=params,
        )
        self._task = asyncio.create_task(self._run(generation, fetch, params))
        self._task.add_done_callback(partial(self._on_done, generation))
        return self._task

    async def load(
        self, fetch: Callable[[], Awaitable[T]], params: Any = None
    ) -> FetchState[T]:
        """Start a chain and wait until the newest chain on this site settles.

        The returned state belongs to the newest chain, which may have been
        started by another caller with different ``params``.
        """
        task = self.trigger(fetch, params)
        while True:
            await asyncio.wait({task})
            current = self._task
            if current is None or current is task or current.done():
                return self._state
            task = current

    async def cancel(self) -> None:
        """Cancel the chain in flight, if any. Never produces an error state."""
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(
        self, generation: int, fetch: Callable[[], Awaitable[T]], params: Any
    ) -> None:
        try:
            value = await fetch()
        except TrackerError as e:
            if generation == self._generation:
                self._fail(str(e), e.code)
                logger.warning(
                    "fetch_failed",
                    site=self._name,
                    error=str(e),
                    error_code=e.code,
                    params=params,
                )
            return
        except Exception:
            if generation == self._generation:
                self._fail(GENERIC_ERROR_MESSAGE, TrackerError.code)
            logger.exception("fetch_crashed", site=self._name, params=params)
            return

        if generation != self._generation:
            logger.debug("fetch_result_discarded", site=self._name, generation=generation)
            return

        self._state = FetchState(
            status=FetchStatus.READY,
            value=value,
            params=params,
            updated_at=time.time(),
        )

    def _on_done(self, generation: int, task: asyncio.Task) -> None:  # type: ignore[type-arg]
        # Also runs for tasks cancelled before their first step.
        if not task.cancelled() or generation != self._generation:
            return
        self._state = replace(
            self._state,
            status=FetchStatus.READY if self._state.value is not None else FetchStatus.IDLE,
        )
        logger.debug("fetch_cancelled", site=self._name, generation=generation)

    def _fail(self, message: str, code: str) -> None:
        self._state = replace(
            self._state,
            status=FetchStatus.ERROR,
            value=self._state.value if self._keep_value_on_error else None,
            error=message,
            error_code=code,
        )
