from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Iterable

import utils
from chains.cosmos.client import CosmosClient
from chains.cosmos.denoms import (
    DEFAULT_DECIMALS,
    DenomMetadata,
    format_denom_amount,
    get_denom_metadata,
    lookup_native_denom,
)
from chains.cosmos.ibc_denoms import extract_ibc_hash, is_ibc_denom
from exceptions import MalformedHash, ResolutionError

from .ibc_resolver import IbcResolver

log = logging.getLogger(__name__)


class DenomResolver:
    """Entry point for turning denoms into display strings.

    Lookup order: static registry, indexer metadata (if loaded), persistent IBC cache.
    `resolve_display` never blocks nor raises; on an IBC cache miss it returns the raw denom
    and resolves it in the background, so later calls return the symbol.
    """

    def __init__(self, ibc_resolver: IbcResolver):
        self.ibc = ibc_resolver
        self.store = ibc_resolver.store

        self._indexer_metadata: dict[str, DenomMetadata] = {}
        self._indexer_task: asyncio.Task | None = None
        self._background_tasks: set[asyncio.Task] = set()
        self._scheduled: set[str] = set()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(ibc={self.ibc})"

    @property
    def is_ready(self) -> bool:
        """Whether indexer metadata has been loaded (successfully or not)"""
        return self._indexer_task is not None and self._indexer_task.done()

    @property
    def n_pending(self) -> int:
        return len(self._background_tasks)

    def _lookup(self, denom: str) -> DenomMetadata | None:
        if (metadata := lookup_native_denom(denom)) is not None:
            return metadata
        if (metadata := self._indexer_metadata.get(denom)) is not None:
            return metadata
        if (ibc_hash := extract_ibc_hash(denom)) is not None:
            return self.ibc.get_cached(ibc_hash)
        return None

    def resolve_display(self, denom: str) -> str:
        try:
            if (metadata := self._lookup(denom)) is not None:
                return metadata.symbol
        except MalformedHash:
            log.debug(f"Not resolving malformed IBC denom {denom!r}")
            return denom
        if is_ibc_denom(denom):
            self._schedule_resolution(denom.partition("/")[2].upper())
        return denom

    def resolve_display_batch(self, denoms: Iterable[str]) -> dict[str, str]:
        resolved: dict[str, str] = {}
        for denom in denoms:
            if denom not in resolved:
                resolved[denom] = self.resolve_display(denom)
        return resolved

    async def resolve_display_async(self, denom: str) -> DenomMetadata:
        """Metadata for denom, resolving IBC denoms remotely if needed.

        Raises MalformedHash for invalid IBC denoms and ResolutionError if resolution fails.
        """
        if (metadata := self._lookup(denom)) is not None:
            return metadata
        if is_ibc_denom(denom):
            return await self.ibc.resolve(denom.partition("/")[2])
        return get_denom_metadata(denom)

    def get_metadata(self, denom: str) -> DenomMetadata:
        """Best-effort metadata without I/O, inferring decimals for unknown native denoms"""
        try:
            if (metadata := self._lookup(denom)) is not None:
                return metadata
        except MalformedHash:
            pass
        return get_denom_metadata(denom)

    def format_amount(
        self,
        amount: int | str | Decimal,
        denom: str,
        max_decimals: int = 2,
        abbreviated: bool = False,
    ) -> str:
        """Amount in base units formatted with its symbol, e.g. '1.50 ATOM'"""
        metadata = self.get_metadata(denom)
        formatted = format_denom_amount(amount, metadata.decimals, max_decimals, abbreviated)
        return f"{formatted} {self.resolve_display(denom)}"

    def _schedule_resolution(self, ibc_hash: str):
        if ibc_hash in self._scheduled or self.ibc.is_resolving(ibc_hash):
            return
        try:
            utils.async_.spawn(self._resolve_in_background(ibc_hash), self._background_tasks)
        except RuntimeError:
            log.debug(f"No running event loop, not resolving {ibc_hash=}")
        else:
            self._scheduled.add(ibc_hash)

    async def _resolve_in_background(self, ibc_hash: str):
        try:
            metadata = await self.ibc.resolve(ibc_hash)
        except ResolutionError as e:
            log.debug(f"Background resolution of {ibc_hash=} failed ({e!r})")
        else:
            log.debug(f"Background resolution of {ibc_hash=} -> {metadata.symbol}")
        finally:
            self._scheduled.discard(ibc_hash)

    async def wait_pending(self):
        """Wait for all background resolutions scheduled so far"""
        while self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    async def load_indexer_metadata(self, client: CosmosClient):
        """Load denom metadata from the indexer once; concurrent callers share the same load"""
        if self._indexer_task is None:
            self._indexer_task = asyncio.ensure_future(self._load_indexer_metadata(client))
        await asyncio.shield(self._indexer_task)

    async def _load_indexer_metadata(self, client: CosmosClient):
        try:
            rows = await client.indexer.get_denom_metadata()
        except ResolutionError as e:
            log.warning(f"Failed to load denom metadata from indexer ({e!r})")
            return
        for row in rows:
            try:
                denom, symbol = row["denom"], row["symbol"]
                decimals = row.get("decimals")
                decimals = DEFAULT_DECIMALS if decimals is None else int(decimals)
            except (KeyError, TypeError, ValueError):
                log.debug(f"Skipping indexer denom metadata row {row!r}")
                continue
            if not denom or not symbol:
                continue
            self._indexer_metadata[denom] = DenomMetadata(
                denom=denom,
                display_name=symbol,
                symbol=symbol,
                decimals=decimals,
                is_ibc=is_ibc_denom(denom),
                ibc_hash=denom.partition("/")[2] if is_ibc_denom(denom) else None,
            )
        log.info(f"Loaded {len(self._indexer_metadata)} denoms from indexer")
