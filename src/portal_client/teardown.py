"""Single-flight session teardown."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class SessionTeardown:
    """Invoke ``sign_out`` at most once per failure epoch.

    `trigger` never waits for the sign-out to finish; callers reject their
    own request straight away. While a sign-out is running further triggers
    are dropped, and a trigger for an epoch that was already torn down is
    ignored even after the sign-out settled. Triggers without an epoch are
    only deduplicated against the running sign-out.
    """

    def __init__(self, sign_out: Callable[[], Awaitable[None]]) -> None:
        self._sign_out = sign_out
        self._task: asyncio.Task[None] | None = None
        self._torn_down_epoch: int | None = None
        self._sign_out_count = 0

    @property
    def in_flight(self) -> bool:
        return self._task is not None

    @property
    def sign_out_count(self) -> int:
        return self._sign_out_count

    def trigger(self, *, epoch: int | None = None) -> bool:
        """Schedule a sign-out; return False when this request was deduplicated."""

        if self._task is not None:
            logger.debug("Sign-out already in progress; skipping duplicate teardown")
            return False
        if epoch is not None and epoch == self._torn_down_epoch:
            logger.debug("Refresh epoch %s already torn down", epoch)
            return False
        if epoch is not None:
            self._torn_down_epoch = epoch
        self._sign_out_count += 1
        logger.warning("Tearing down session (epoch=%s)", epoch if epoch is not None else "n/a")
        self._task = asyncio.get_running_loop().create_task(self._run())
        return True

    async def wait(self) -> None:
        """Wait for the running sign-out, if any, to settle."""

        task = self._task
        if task is not None:
            await asyncio.shield(task)

    async def _run(self) -> None:
        try:
            await self._sign_out()
        except Exception:
            logger.exception("Sign-out failed during session teardown")
        finally:
            self._task = None
