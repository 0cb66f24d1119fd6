from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Hashable, TypeVar

log = logging.getLogger(__name__)

_KT = TypeVar("_KT", bound=Hashable)
_VT = TypeVar("_VT")


class InFlight(Generic[_KT, _VT]):
    """Map of key -> pending task, so that concurrent requests for the same key share one call.

    The check and the insert in run() happen with no await in between, so at most one task
    exists per key at any time. Waiters are shielded: cancelling a waiter does not cancel the
    shared task, which always runs to completion.
    """

    def __init__(self):
        self._pending: dict[_KT, asyncio.Task[_VT]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n_pending={len(self)})"

    async def run(self, key: _KT, func: Callable[[], Awaitable[_VT]]) -> _VT:
        if (task := self._pending.get(key)) is None:
            task = asyncio.ensure_future(func())
            self._pending[key] = task
            task.add_done_callback(lambda t: self._discard(key, t))
        else:
            log.debug(f"Joining in-flight request {key=}")
        return await asyncio.shield(task)

    def _discard(self, key: _KT, task: asyncio.Task):
        if self._pending.get(key) is task:
            del self._pending[key]
