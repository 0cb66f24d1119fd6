from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any

import httpx
import pytest

from chains.cosmos.client import CosmosClient
from chains.cosmos.ibc_denoms import compute_ibc_hash
from metadata import DenomResolver, DenomTraceStore, IbcResolver
from utils.cache import CacheGroup, clear_caches

LCD_URI = "http://lcd.test"
POSTGREST_URI = "http://indexer.test"

ATOM_PATH = "transfer/channel-0"
ATOM_HASH = compute_ibc_hash(ATOM_PATH, "uatom")
ATOM_DENOM = f"ibc/{ATOM_HASH}"


class FakeChain:
    """Routes requests by URL path to canned JSON responses, counting every request"""

    def __init__(self):
        self.routes: dict[str, tuple[int, Any]] = {}
        self.requests: Counter[str] = Counter()
        self.fail_with: Exception | None = None
        # Requests block until this event is set
        self.gate: asyncio.Event | None = None

    def add(self, path: str, json: Any = None, status: int = 200):
        self.routes[path] = (status, json)

    def add_trace(self, path: str, base_denom: str) -> str:
        ibc_hash = compute_ibc_hash(path, base_denom)
        self.add(
            f"ibc/apps/transfer/v1/denom_traces/{ibc_hash}",
            {"denom_trace": {"path": path, "base_denom": base_denom}},
        )
        return ibc_hash

    def add_channel(self, channel_id: str, chain_id: str, port_id: str = "transfer"):
        url = f"ibc/core/channel/v1/channels/{channel_id}/ports/{port_id}"
        self.add(
            url,
            {
                "channel": {
                    "state": "STATE_OPEN",
                    "counterparty": {"port_id": "transfer", "channel_id": "channel-141"},
                    "connection_hops": ["connection-0"],
                }
            },
        )
        self.add(
            f"{url}/client_state",
            {"identified_client_state": {"client_state": {"chain_id": chain_id}}},
        )

    def count(self, prefix: str) -> int:
        return sum(n for path, n in self.requests.items() if path.startswith(prefix))

    async def handle(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0)
        path = request.url.path.lstrip("/")
        self.requests[path] += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        if path not in self.routes:
            return httpx.Response(404, json={"code": 5, "message": f"{path} not found"})
        status, json = self.routes[path]
        return httpx.Response(status, json=json)


@pytest.fixture(autouse=True)
def _clear_caches():
    clear_caches(CacheGroup.ALL, clear_all=True)
    yield
    clear_caches(CacheGroup.ALL, clear_all=True)


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def client(chain: FakeChain) -> CosmosClient:
    return CosmosClient(
        lcd_uri=LCD_URI,
        postgrest_uri=POSTGREST_URI,
        transport=httpx.MockTransport(chain.handle),
    )


@pytest.fixture
def store() -> DenomTraceStore:
    return DenomTraceStore(path=None)


@pytest.fixture
def ibc_resolver(client: CosmosClient, store: DenomTraceStore) -> IbcResolver:
    return IbcResolver(client, store)


@pytest.fixture
def denom_resolver(ibc_resolver: IbcResolver) -> DenomResolver:
    return DenomResolver(ibc_resolver)
