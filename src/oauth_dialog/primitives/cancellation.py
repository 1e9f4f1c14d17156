"""Caller-controlled cancellation for an in-flight dialog."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class CancelToken:
    """Cancellation signal shared between a caller and a dialog.

    Cancelling is not an error: a cancelled dialog simply returns no code.
    A deadline is layered on top with ``cancel_after``.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._timer: asyncio.TimerHandle | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel the dialog. Safe to call multiple times."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._event.set()

    def cancel_after(self, delay: float) -> None:
        """Cancel automatically after ``delay`` seconds.

        Replaces any deadline set earlier.
        """
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._on_deadline)

    def _on_deadline(self) -> None:
        logger.debug("Dialog deadline reached, cancelling")
        self._timer = None
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()
