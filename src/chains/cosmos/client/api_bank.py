from __future__ import annotations

from typing import TYPE_CHECKING

from exceptions import MalformedResponse

from .base_api import Api

if TYPE_CHECKING:
    from .async_client import CosmosClient  # noqa: F401


class BankApi(Api["CosmosClient"]):
    async def get_total_supply(self) -> list[dict[str, str]]:
        response: list[dict[str, str]] = []
        params: dict = {}
        while True:
            data = await self.get_json(
                self.client.lcd_http_client, "cosmos/bank/v1beta1/supply", params=params
            )
            try:
                response.extend(data["supply"])
                pagination_key = (data.get("pagination") or {}).get("next_key")
            except (KeyError, TypeError, AttributeError) as e:
                raise MalformedResponse(f"Unexpected supply response: {data!r}") from e
            if not pagination_key:
                return response
            params["pagination.key"] = pagination_key
