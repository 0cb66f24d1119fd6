from __future__ import annotations

import logging
from functools import partial

import configs
from chains.cosmos.client import CosmosClient
from chains.cosmos.denoms import (
    DenomMetadata,
    extract_symbol,
    get_denom_metadata,
    guess_decimals,
    lookup_native_denom,
)
from chains.cosmos.ibc_denoms import (
    DEFAULT_PORT,
    DenomTrace,
    IbcChannelInfo,
    compute_ibc_hash,
    format_channels,
    parse_path,
    split_full_path,
    to_ibc_denom,
    truncate_ibc_hash,
    validate_ibc_hash,
)
from exceptions import MalformedTrace, ResolutionError
from utils.cache import CacheGroup, InFlight, cached, json_hashkey, new_ttl_cache

from .denom_cache import DenomTraceStore

log = logging.getLogger(__name__)


def derive_display(
    trace: DenomTrace,
    ibc_hash: str,
    source_chain_id: str | None = None,
) -> DenomTrace:
    """Fill symbol, decimals and display name of a trace from its base denom"""
    base_denom = trace.base_denom
    if (native := lookup_native_denom(base_denom)) is not None:
        symbol, decimals = native.symbol, native.decimals
    elif base_denom and "/" not in base_denom and ":" not in base_denom:
        symbol, decimals = extract_symbol(base_denom), guess_decimals(base_denom)
    else:
        # Factory, pool or cw20 denoms have no usable ticker
        symbol, decimals = truncate_ibc_hash(ibc_hash), guess_decimals(base_denom)

    if source_chain_id:
        display_name = f"{symbol} (from {source_chain_id})"
    else:
        display_name = f"{symbol} ({format_channels(trace.path)})"
    return trace.with_display(
        symbol=symbol,
        decimals=decimals,
        display_name=display_name,
        source_chain_id=source_chain_id,
    )


def trace_to_metadata(trace: DenomTrace, ibc_hash: str) -> DenomMetadata:
    assert trace.symbol is not None and trace.display_name is not None
    decimals = guess_decimals(trace.base_denom) if trace.decimals is None else trace.decimals
    return DenomMetadata(
        denom=to_ibc_denom(ibc_hash),
        display_name=trace.display_name,
        symbol=trace.symbol,
        decimals=decimals,
        is_ibc=True,
        ibc_hash=ibc_hash.upper(),
    )


class IbcResolver:
    """Resolves `ibc/<hash>` denoms through the chain's transfer module.

    Successful resolutions are written to the DenomTraceStore and never re-queried; failures
    are not cached. Concurrent resolutions of the same hash share a single request.
    """

    def __init__(
        self,
        client: CosmosClient,
        store: DenomTraceStore,
        enrich_channels: bool = configs.ENRICH_IBC_CHANNELS,
        channel_cache_ttl: float = configs.CHANNEL_CACHE_TTL,
        channel_cache_size: int = configs.CHANNEL_CACHE_SIZE,
    ):
        self.client = client
        self.store = store
        self.enrich_channels = enrich_channels

        self._in_flight: InFlight[str, DenomMetadata] = InFlight()
        self._channel_cache = new_ttl_cache(CacheGroup.IBC, channel_cache_size, channel_cache_ttl)
        self._query_channel_info = cached(self._channel_cache, key=json_hashkey)(
            self._fetch_channel_info
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(client={self.client}, store={self.store})"

    def get_cached(self, ibc_hash: str) -> DenomMetadata | None:
        if (trace := self.store.get(ibc_hash)) is None or trace.symbol is None:
            return None
        return trace_to_metadata(trace, ibc_hash)

    def is_resolving(self, ibc_hash: str) -> bool:
        return ibc_hash.upper() in self._in_flight

    async def resolve(self, ibc_hash: str) -> DenomMetadata:
        ibc_hash = validate_ibc_hash(ibc_hash)
        if (metadata := self.get_cached(ibc_hash)) is not None:
            return metadata
        return await self._in_flight.run(ibc_hash, partial(self._resolve_trace, ibc_hash))

    async def _resolve_trace(self, ibc_hash: str) -> DenomMetadata:
        # A concurrent resolution may have finished between the caller's check and now
        if (metadata := self.get_cached(ibc_hash)) is not None:
            return metadata
        trace = await self.client.ibc.get_denom_trace(ibc_hash)
        try:
            hops = parse_path(trace.path)
        except ValueError as e:
            raise MalformedTrace(f"{ibc_hash=}: {e}") from e
        if not hops:
            raise MalformedTrace(f"{ibc_hash=} has an empty trace path (base={trace.base_denom})")
        if compute_ibc_hash(trace.path, trace.base_denom) != ibc_hash:
            raise MalformedTrace(f"{ibc_hash=} does not match trace {trace.full_path!r}")

        port_id, channel_id = hops[0]
        source_chain_id = await self._get_source_chain_id(channel_id, port_id)
        return await self._store(derive_display(trace, ibc_hash, source_chain_id), ibc_hash)

    async def resolve_from_packet(
        self,
        packet_denom: str,
        src_channel: str,
        dst_channel: str,
        src_port: str = DEFAULT_PORT,
        dst_port: str = DEFAULT_PORT,
    ) -> DenomMetadata:
        """Resolve the denom received through a `fungible_token_packet` on this chain.

        The receiving denom is computed locally from the packet, so no trace query is made.
        Tokens returning to their origin unwind to the remaining path (possibly native).
        """
        returning_prefix = f"{src_port}/{src_channel}/"
        if packet_denom.startswith(returning_prefix):
            full_path = packet_denom[len(returning_prefix) :]
        else:
            full_path = f"{dst_port}/{dst_channel}/{packet_denom}"
        path, base_denom = split_full_path(full_path)
        if not path:
            return get_denom_metadata(base_denom)

        ibc_hash = compute_ibc_hash(path, base_denom)
        if (metadata := self.get_cached(ibc_hash)) is not None:
            return metadata

        async def _resolve() -> DenomMetadata:
            port_id, channel_id = parse_path(path)[0]
            source_chain_id = await self._get_source_chain_id(channel_id, port_id)
            trace = DenomTrace(base_denom=base_denom, path=path)
            return await self._store(derive_display(trace, ibc_hash, source_chain_id), ibc_hash)

        return await self._in_flight.run(ibc_hash, _resolve)

    async def _store(self, trace: DenomTrace, ibc_hash: str) -> DenomMetadata:
        await self.store.set(ibc_hash, trace)
        log.info(
            f"Resolved {to_ibc_denom(ibc_hash)} -> {trace.symbol}",
            extra={"data": trace.to_data()},
        )
        return trace_to_metadata(trace, ibc_hash)

    async def _get_source_chain_id(self, channel_id: str, port_id: str) -> str | None:
        if not self.enrich_channels:
            return None
        try:
            return (await self.query_channel_info(channel_id, port_id)).counterparty_chain_id
        except ResolutionError as e:
            log.debug(f"Could not get channel info for {port_id}/{channel_id} ({e!r})")
            return None

    async def query_channel_info(
        self, channel_id: str, port_id: str = DEFAULT_PORT
    ) -> IbcChannelInfo:
        """Channel info, cached for `channel_cache_ttl` seconds"""
        return await self._query_channel_info(channel_id, port_id)

    async def _fetch_channel_info(self, channel_id: str, port_id: str) -> IbcChannelInfo:
        return await self.client.ibc.get_channel_info(channel_id, port_id)

    def clear_channel_cache(self):
        self._channel_cache.clear()
