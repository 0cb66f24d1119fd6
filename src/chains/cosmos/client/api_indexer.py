from __future__ import annotations

from typing import TYPE_CHECKING

from exceptions import MalformedResponse
from utils.cache import CacheGroup, ttl_cache

from .base_api import Api

if TYPE_CHECKING:
    from .async_client import CosmosClient  # noqa: F401


class IndexerApi(Api["CosmosClient"]):
    """PostgREST API of the chain indexer"""

    @ttl_cache(CacheGroup.INDEXER)
    async def get_denom_metadata(self) -> list[dict]:
        data = await self.get_json(
            self.client.postgrest_http_client,
            "denom_metadata",
            params={"select": "denom,symbol,decimals"},
        )
        if not isinstance(data, list):
            raise MalformedResponse(f"Unexpected denom_metadata response: {data!r}")
        return data
