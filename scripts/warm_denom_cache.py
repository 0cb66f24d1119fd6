"""Resolve every IBC denom in the chain's total supply and persist it to the denom cache"""
from __future__ import annotations

import asyncio
import logging

import configs
from chains.cosmos.client import CosmosClient
from chains.cosmos.ibc_denoms import extract_ibc_hash, is_ibc_denom
from exceptions import MalformedHash, ResolutionError
from metadata import DenomTraceStore, IbcResolver
from startup import setup

log = logging.getLogger(__name__)


async def _resolve(resolver: IbcResolver, denom: str) -> bool:
    try:
        ibc_hash = extract_ibc_hash(denom)
        assert ibc_hash is not None
        metadata = await resolver.resolve(ibc_hash)
    except (MalformedHash, ResolutionError) as e:
        log.warning(f"Could not resolve {denom} ({e!r})")
        return False
    log.debug(f"{denom} -> {metadata.symbol}")
    return True


async def warm_denom_cache(
    cache_path: str = configs.DENOM_CACHE_PATH, chain_id: str | None = configs.CHAIN_ID
) -> int:
    store = DenomTraceStore(cache_path)
    async with CosmosClient.from_chain_id(chain_id) as client:
        resolver = IbcResolver(client, store)
        supplies = await client.bank.get_total_supply()
        denoms = sorted({s["denom"] for s in supplies if is_ibc_denom(s["denom"])})
        log.info(f"Found {len(denoms)} IBC denoms in total supply")
        results = await asyncio.gather(*(_resolve(resolver, denom) for denom in denoms))
    log.info(f"Resolved {sum(results)}/{len(denoms)} IBC denoms, cache size={len(store)}")
    return sum(results)


def main():
    setup()
    asyncio.run(warm_denom_cache())


if __name__ == "__main__":
    main()
