from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

import httpx

from exceptions import MalformedResponse, NetworkError, NotFound

if TYPE_CHECKING:
    from utils.ahttp import AsyncClient

    from .async_client import CosmosClient


CosmosClientT = TypeVar("CosmosClientT", bound="CosmosClient")

_NOT_FOUND_STATUS = 404


class Api(Generic[CosmosClientT]):
    def __init__(self, client: CosmosClientT):
        self.client = client

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(client={self.client})"

    @staticmethod
    async def get_json(http_client: AsyncClient, url: str, **kwargs) -> Any:
        """GET url and decode its JSON body, translating httpx errors to ResolutionError"""
        try:
            res = await http_client.get(url, **kwargs)
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == _NOT_FOUND_STATUS:
                raise NotFound(f"{url} not found") from e
            raise NetworkError(f"{url}: {status_code=}", status_code) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"{url}: {e!r}") from e
        try:
            return res.json()
        except ValueError as e:
            raise MalformedResponse(f"{url}: invalid JSON response") from e
