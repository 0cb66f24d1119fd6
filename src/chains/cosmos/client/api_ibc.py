from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from exceptions import MalformedResponse, MalformedTrace, NetworkError, NotFound

from ..ibc_denoms import DEFAULT_PORT, DenomTrace, IbcChannelInfo
from .base_api import Api

if TYPE_CHECKING:
    from .async_client import CosmosClient  # noqa: F401

log = logging.getLogger(__name__)

# ibc-go v10 removed denom_traces in favour of denoms; gateways answer 404 or 501 for it
_FALLBACK_STATUS_CODES = (501,)


class IbcApi(Api["CosmosClient"]):
    async def get_denom_trace(self, ibc_hash: str) -> DenomTrace:
        try:
            return await self._get_denom_trace_v1(ibc_hash)
        except NotFound:
            pass
        except NetworkError as e:
            if e.status_code not in _FALLBACK_STATUS_CODES:
                raise
        log.debug(f"denom_traces unavailable for {ibc_hash=}, trying denoms endpoint")
        return await self._get_denom(ibc_hash)

    async def _get_denom_trace_v1(self, ibc_hash: str) -> DenomTrace:
        url = f"ibc/apps/transfer/v1/denom_traces/{ibc_hash}"
        data = await self.get_json(self.client.lcd_http_client, url)
        try:
            trace = data["denom_trace"]
            return DenomTrace(base_denom=trace["base_denom"], path=trace["path"])
        except (KeyError, TypeError) as e:
            raise MalformedTrace(f"Unexpected denom trace for {ibc_hash=}: {data!r}") from e

    async def _get_denom(self, ibc_hash: str) -> DenomTrace:
        url = f"ibc/apps/transfer/v1/denoms/{ibc_hash}"
        data = await self.get_json(self.client.lcd_http_client, url)
        try:
            denom = data["denom"]
            path = "/".join(f"{hop['port_id']}/{hop['channel_id']}" for hop in denom["trace"])
            return DenomTrace(base_denom=denom["base"], path=path)
        except (KeyError, TypeError) as e:
            raise MalformedTrace(f"Unexpected denom for {ibc_hash=}: {data!r}") from e

    async def get_channel_info(
        self, channel_id: str, port_id: str = DEFAULT_PORT
    ) -> IbcChannelInfo:
        url = f"ibc/core/channel/v1/channels/{channel_id}/ports/{port_id}"
        channel_data = await self.get_json(self.client.lcd_http_client, url)
        client_data = await self.get_json(self.client.lcd_http_client, f"{url}/client_state")
        try:
            channel = channel_data["channel"]
            chain_id = client_data["identified_client_state"]["client_state"]["chain_id"]
            if not chain_id:
                raise ValueError("empty chain_id")
            return IbcChannelInfo(
                channel_id=channel_id,
                port_id=port_id,
                counterparty_channel_id=channel["counterparty"]["channel_id"],
                counterparty_port_id=channel["counterparty"].get("port_id") or DEFAULT_PORT,
                counterparty_chain_id=chain_id,
                connection_id=(channel.get("connection_hops") or [""])[0],
                state=channel.get("state") or "STATE_OPEN",
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(f"Unexpected channel data for {channel_id=}") from e
