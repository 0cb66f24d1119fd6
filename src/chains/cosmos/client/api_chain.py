from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from exceptions import MalformedResponse, NetworkError, NotFound

from .base_api import Api

if TYPE_CHECKING:
    from .async_client import CosmosClient  # noqa: F401

log = logging.getLogger(__name__)


class ChainApi(Api["CosmosClient"]):
    async def get_chain_id(self) -> str:
        data = await self.get_json(
            self.client.lcd_http_client, "cosmos/base/tendermint/v1beta1/node_info"
        )
        try:
            chain_id = data["default_node_info"]["network"]
        except (KeyError, TypeError) as e:
            raise MalformedResponse(f"Unexpected node_info response: {data!r}") from e
        if not chain_id:
            raise MalformedResponse("Empty chain id in node_info")
        return chain_id

    async def get_module_names(self) -> list[str] | None:
        """Names of the modules in the upgrade module, None if the query is unsupported"""
        try:
            data = await self.get_json(
                self.client.lcd_http_client, "cosmos/upgrade/v1beta1/module_versions"
            )
        except NotFound:
            log.info("module_versions query not available")
            return None
        except NetworkError as e:
            if e.status_code != 501:
                raise
            log.info("module_versions query not implemented")
            return None
        try:
            return [m["name"] for m in data["module_versions"]]
        except (KeyError, TypeError) as e:
            raise MalformedResponse(f"Unexpected module_versions response: {data!r}") from e

    async def get_bond_denom(self) -> str | None:
        """Staking bond denom, None if the chain has no staking module (e.g. PoA chains)"""
        try:
            data = await self.get_json(self.client.lcd_http_client, "cosmos/staking/v1beta1/params")
            return data["params"]["bond_denom"] or None
        except (NotFound, MalformedResponse, KeyError, TypeError) as e:
            log.info(f"Could not get bond denom ({e!r})")
            return None
        except NetworkError as e:
            if e.status_code is None:
                raise
            log.info(f"Could not get bond denom ({e!r})")
            return None
