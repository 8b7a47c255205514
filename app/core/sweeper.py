"""Periodic background jobs (expired record sweeps, counter resets).

Sweepers run as asyncio tasks on the server's event loop, outside request
handling. Jobs are short, synchronous, in-memory passes that take the same
locks as the request path.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicSweeper:
    """Runs ``job`` every ``interval_seconds`` until stopped."""

    def __init__(
        self,
        name: str,
        *,
        interval_seconds: float,
        job: Callable[[], int | None],
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.name = name
        self.interval_seconds = interval_seconds
        self._job = job
        self._task: asyncio.Task[None] | None = None

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"PeriodicSweeper(name={self.name!r}, interval_seconds={self.interval_seconds}, "
            f"running={self.running})"
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int | None:
        """Execute a single pass of the job.

        Failures are logged and swallowed so one bad pass does not stop the
        loop; the next interval tries again.
        """

        try:
            result = self._job()
        except Exception as exc:
            logger.exception(
                "sweeper.job_failed",
                extra={"sweeper": self.name, "error_type": type(exc).__name__},
            )
            return None

        logger.debug(
            "sweeper.completed",
            extra={"sweeper": self.name, "removed": result},
        )
        return result

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.run_once()

    def start(self) -> None:
        """Schedule the loop on the running event loop. Idempotent."""

        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"sweeper:{self.name}"
        )
        logger.info(
            "sweeper.started",
            extra={"sweeper": self.name, "interval_s": self.interval_seconds},
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""

        task = self._task
        self._task = None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Only the loop's own cancellation is expected here; a caller
            # being cancelled while waiting must still see it.
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        logger.info("sweeper.stopped", extra={"sweeper": self.name})
