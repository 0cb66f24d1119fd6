from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os

import aiofiles
import aiofiles.os

import configs
from chains.cosmos.ibc_denoms import DenomTrace

log = logging.getLogger(__name__)


class DenomTraceStore:
    """Persistent map of IBC hash -> resolved DenomTrace, backed by a JSON file.

    Entries never expire: an IBC hash is a deterministic function of its trace. Writes update
    memory synchronously and are flushed to disk afterwards (whole file, atomic replace).
    With `path=None` the store lives in memory only.
    """

    def __init__(self, path: str | None = configs.DENOM_CACHE_PATH):
        self.path = path
        self._traces: dict[str, DenomTrace] = self._load()
        self._flush_lock = asyncio.Lock()
        self._version = self._flushed_version = 0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.path!r}, n_entries={len(self)})"

    def __len__(self) -> int:
        return len(self._traces)

    def __contains__(self, ibc_hash: object) -> bool:
        return isinstance(ibc_hash, str) and ibc_hash.upper() in self._traces

    def get(self, ibc_hash: str) -> DenomTrace | None:
        return self._traces.get(ibc_hash.upper())

    async def set(self, ibc_hash: str, trace: DenomTrace):
        self._traces[ibc_hash.upper()] = trace
        self._version += 1
        await self.flush()

    async def flush(self):
        """Write every entry to disk. Persistence is best effort: write errors are logged and
        the in-memory entries are kept. Flushes queued behind one that already wrote the
        latest version return without writing."""
        if self.path is None:
            return
        async with self._flush_lock:
            version = self._version
            if version == self._flushed_version:
                return
            data = json.dumps(
                {ibc_hash: trace.to_data() for ibc_hash, trace in self._traces.items()},
                indent=2,
                sort_keys=True,
            )
            tmp_path = f"{self.path}.tmp"
            try:
                await aiofiles.os.makedirs(
                    os.path.dirname(os.path.abspath(self.path)), exist_ok=True
                )
                async with aiofiles.open(tmp_path, "w") as f:
                    await f.write(data)
                await aiofiles.os.replace(tmp_path, self.path)
            except OSError as e:
                log.warning(f"Could not write denom cache {self.path} ({e!r})")
                with contextlib.suppress(OSError):
                    await aiofiles.os.remove(tmp_path)
                return
            self._flushed_version = version
        log.debug(f"Flushed {len(self)} denom traces to {self.path}")

    def clear(self):
        self._traces.clear()
        if self.path is not None and os.path.exists(self.path):
            os.remove(self.path)
        log.info(f"Cleared {self}")

    def _load(self) -> dict[str, DenomTrace]:
        if self.path is None or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.warning(f"Could not read denom cache {self.path} ({e!r}), starting empty")
            return {}
        if not isinstance(data, dict):
            log.warning(f"Unexpected denom cache format in {self.path}, starting empty")
            return {}
        traces: dict[str, DenomTrace] = {}
        for ibc_hash, entry in data.items():
            try:
                traces[ibc_hash.upper()] = DenomTrace.from_data(entry)
            except (KeyError, TypeError, ValueError):
                log.warning(f"Skipping malformed denom cache entry {ibc_hash=}")
        log.info(f"Loaded {len(traces)} denom traces from {self.path}")
        return traces
