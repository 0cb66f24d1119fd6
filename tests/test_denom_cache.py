import asyncio
import json

import aiofiles.os

from chains.cosmos.ibc_denoms import DenomTrace, compute_ibc_hash
from metadata import DenomTraceStore

TRACE = DenomTrace(
    base_denom="uatom",
    path="transfer/channel-0",
    display_name="ATOM (from cosmoshub-4)",
    symbol="ATOM",
    decimals=6,
    source_chain_id="cosmoshub-4",
)
IBC_HASH = compute_ibc_hash(TRACE.path, TRACE.base_denom)


def test_store_persists_across_instances(tmp_path):
    path = str(tmp_path / "cache" / "traces.json")
    store = DenomTraceStore(path)
    assert len(store) == 0

    asyncio.run(store.set(IBC_HASH.lower(), TRACE))
    assert store.get(IBC_HASH) == TRACE
    assert IBC_HASH.lower() in store

    reloaded = DenomTraceStore(path)
    assert len(reloaded) == 1
    assert reloaded.get(IBC_HASH) == TRACE
    with open(path) as f:
        assert json.load(f)[IBC_HASH]["symbol"] == "ATOM"


def test_store_concurrent_writes(tmp_path):
    path = str(tmp_path / "traces.json")
    store = DenomTraceStore(path)
    traces = [TRACE.with_display(base_denom=f"ufoo{i}") for i in range(10)]
    hashes = [compute_ibc_hash(t.path, t.base_denom) for t in traces]

    async def main():
        await asyncio.gather(*(store.set(h, t) for h, t in zip(hashes, traces)))

    asyncio.run(main())
    assert len(DenomTraceStore(path)) == 10


def test_store_coalesces_queued_flushes(tmp_path, monkeypatch):
    path = str(tmp_path / "traces.json")
    store = DenomTraceStore(path)
    traces = [TRACE.with_display(base_denom=f"ubar{i}") for i in range(10)]
    n_writes = 0
    replace = aiofiles.os.replace

    async def counting_replace(src, dst):
        nonlocal n_writes
        n_writes += 1
        await replace(src, dst)

    monkeypatch.setattr(aiofiles.os, "replace", counting_replace)

    async def main():
        await asyncio.gather(
            *(store.set(compute_ibc_hash(t.path, t.base_denom), t) for t in traces)
        )
        await store.set(IBC_HASH, TRACE)

    asyncio.run(main())
    # First write holds one entry, the next covers the other nine, the last adds IBC_HASH
    assert n_writes == 3
    assert len(DenomTraceStore(path)) == 11


def test_store_unwritable_path_keeps_memory(tmp_path):
    store = DenomTraceStore(str(tmp_path))
    assert len(store) == 0

    asyncio.run(store.set(IBC_HASH, TRACE))
    assert store.get(IBC_HASH) == TRACE
    assert not (tmp_path.parent / f"{tmp_path.name}.tmp").exists()


def test_store_corrupt_file(tmp_path):
    path = tmp_path / "traces.json"
    path.write_text("{not json")
    assert len(DenomTraceStore(str(path))) == 0

    path.write_text(json.dumps(["a", "list"]))
    assert len(DenomTraceStore(str(path))) == 0

    path.write_text(json.dumps({IBC_HASH: TRACE.to_data(), "BAD": {"symbol": "X"}}))
    store = DenomTraceStore(str(path))
    assert len(store) == 1 and IBC_HASH in store


def test_store_clear(tmp_path):
    path = tmp_path / "traces.json"
    store = DenomTraceStore(str(path))
    asyncio.run(store.set(IBC_HASH, TRACE))
    assert path.exists()

    store.clear()
    assert len(store) == 0 and not path.exists()
    assert len(DenomTraceStore(str(path))) == 0


def test_memory_only_store():
    store = DenomTraceStore(path=None)
    asyncio.run(store.set(IBC_HASH, TRACE))
    assert store.get(IBC_HASH) == TRACE
    store.clear()
    assert store.get(IBC_HASH) is None
