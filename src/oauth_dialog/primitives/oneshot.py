"""Single-delivery handoff between the capture server and the dialog."""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

T = TypeVar("T")


class OneShot(Generic[T]):
    """A value that can be fulfilled at most once and awaited at most once.

    ``fulfil`` never blocks. The first call wins; later calls return False
    and leave the stored value alone, so a late producer cannot stall once
    the consumer has gone away.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    @property
    def fulfilled(self) -> bool:
        return self._future.done() and not self._future.cancelled()

    def fulfil(self, value: T) -> bool:
        """Deliver ``value``. Returns False if already fulfilled or closed."""
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def close(self) -> None:
        """Stop accepting values; pending waiters see CancelledError."""
        if not self._future.done():
            self._future.cancel()

    async def wait(self) -> T:
        return await asyncio.shield(self._future)
