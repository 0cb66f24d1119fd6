from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TypeVar

log = logging.getLogger(__name__)

_AsyncBlockchainClientT = TypeVar("_AsyncBlockchainClientT", bound="AsyncBlockchainClient")


class AsyncBlockchainClient(ABC):
    started: bool = False

    @classmethod
    async def new(cls: type[_AsyncBlockchainClientT], *args, **kwargs) -> _AsyncBlockchainClientT:
        self = cls(*args, **kwargs)
        await self.start()
        return self

    async def __aenter__(self):
        if not self.started:
            await self.start()
        return self

    async def __aexit__(self, *args):
        return await self.close()

    @abstractmethod
    async def close(self):
        pass

    async def start(self):
        self.started = True
        log.info(f"Started {self}")
