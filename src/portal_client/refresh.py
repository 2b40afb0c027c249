"""Single-flight credential refresh."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .exceptions import RefreshFailure
from .teardown import SessionTeardown

logger = logging.getLogger(__name__)


class RefreshState(enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"
    SETTLED = "settled"


@dataclass(slots=True, frozen=True)
class RefreshOperation:
    """One running attempt to obtain a new credential, shared by every waiter."""

    epoch: int
    future: asyncio.Future[str]


class RefreshCoordinator:
    """Collapse concurrent refresh requests into one call to ``refresh``.

    Transitions::

        IDLE/SETTLED --join()--> REFRESHING --refresh settles--> SETTLED

    The check-and-set in `join` happens without awaiting, so on a single
    event loop two callers can never both start a refresh. The operation is
    detached before its future is resolved; a 401 seen after settlement
    starts a new epoch.

    A failed refresh triggers ``teardown`` once for its epoch before any
    waiter observes the `RefreshFailure`.
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[str]],
        *,
        teardown: SessionTeardown | None = None,
    ) -> None:
        self._refresh = refresh
        self._teardown = teardown
        self._state = RefreshState.IDLE
        self._operation: RefreshOperation | None = None
        self._task: asyncio.Task[None] | None = None
        self._epoch = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def epoch(self) -> int:
        """Number of refresh operations started so far."""
        return self._epoch

    @property
    def in_flight(self) -> RefreshOperation | None:
        return self._operation

    def join(self) -> RefreshOperation:
        """Return the in-flight operation, starting one if none is running."""

        if self._operation is not None:
            return self._operation
        loop = asyncio.get_running_loop()
        self._epoch += 1
        operation = RefreshOperation(epoch=self._epoch, future=loop.create_future())
        self._operation = operation
        self._state = RefreshState.REFRESHING
        logger.info("Starting credential refresh (epoch=%s)", operation.epoch)
        self._task = loop.create_task(self._run(operation))
        return operation

    async def obtain_refreshed_credential(self) -> str:
        """Wait for the shared refresh and return its token.

        Cancelling the caller leaves the refresh running for other waiters.
        """

        operation = self.join()
        return await asyncio.shield(operation.future)

    async def _run(self, operation: RefreshOperation) -> None:
        try:
            token = await self._refresh()
            if not isinstance(token, str) or not token.strip():
                raise RefreshFailure("Token refresh returned an empty credential")
        except asyncio.CancelledError:
            self._detach(operation)
            operation.future.cancel()
            raise
        except Exception as exc:
            failure = exc if isinstance(exc, RefreshFailure) else RefreshFailure("Token refresh failed")
            if failure is not exc:
                failure.__cause__ = exc
            self._detach(operation)
            logger.warning("Credential refresh failed (epoch=%s): %s", operation.epoch, exc)
            if self._teardown is not None:
                self._teardown.trigger(epoch=operation.epoch)
            operation.future.set_exception(failure)
            # Waiters that were cancelled never read it; avoid the "never retrieved" warning.
            operation.future.add_done_callback(_consume_exception)
        else:
            self._detach(operation)
            logger.info("Credential refresh succeeded (epoch=%s)", operation.epoch)
            operation.future.set_result(token)

    def _detach(self, operation: RefreshOperation) -> None:
        if self._operation is operation:
            self._operation = None
            self._task = None
            self._state = RefreshState.SETTLED


def _consume_exception(future: asyncio.Future[str]) -> None:
    if not future.cancelled():
        future.exception()
