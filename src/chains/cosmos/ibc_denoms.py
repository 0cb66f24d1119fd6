from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional

from exceptions import MalformedHash

IBC_PREFIX = "ibc/"
DEFAULT_PORT = "transfer"

_pat_ibc_hash = re.compile(r"^[0-9A-Fa-f]{64}$")
_pat_channel_id = re.compile(r"^channel-\d+$")


@dataclass(frozen=True)
class DenomTrace:
    base_denom: str
    path: str
    display_name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    source_chain_id: Optional[str] = None

    @property
    def full_path(self) -> str:
        return f"{self.path}/{self.base_denom}" if self.path else self.base_denom

    @property
    def hops(self) -> list[tuple[str, str]]:
        return parse_path(self.path)

    def with_display(self, **kwargs) -> DenomTrace:
        return replace(self, **kwargs)

    def to_data(self) -> dict:
        return {
            "base_denom": self.base_denom,
            "path": self.path,
            "display_name": self.display_name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "source_chain_id": self.source_chain_id,
        }

    @classmethod
    def from_data(cls, data: dict) -> DenomTrace:
        decimals = data.get("decimals")
        return cls(
            base_denom=data["base_denom"],
            path=data["path"],
            display_name=data.get("display_name"),
            symbol=data.get("symbol"),
            decimals=None if decimals is None else int(decimals),
            source_chain_id=data.get("source_chain_id"),
        )


@dataclass(frozen=True)
class IbcChannelInfo:
    channel_id: str
    port_id: str
    counterparty_channel_id: str
    counterparty_port_id: str
    counterparty_chain_id: str
    connection_id: str
    state: str


def is_ibc_denom(denom: str) -> bool:
    return denom.startswith(IBC_PREFIX)


def validate_ibc_hash(ibc_hash: str) -> str:
    """Return the normalized (upper case) hash, raising MalformedHash if not 64 hex chars"""
    if not _pat_ibc_hash.match(ibc_hash):
        raise MalformedHash(f"{IBC_PREFIX}{ibc_hash}")
    return ibc_hash.upper()


def extract_ibc_hash(denom: str) -> str | None:
    """Hash part of an `ibc/<hash>` denom, None for non-IBC denoms.

    Raises MalformedHash if the denom has the IBC prefix but not a valid hash.
    """
    if not is_ibc_denom(denom):
        return None
    try:
        return validate_ibc_hash(denom.partition("/")[2])
    except MalformedHash:
        raise MalformedHash(denom) from None


def to_ibc_denom(ibc_hash: str) -> str:
    return f"{IBC_PREFIX}{ibc_hash.upper()}"


@lru_cache(maxsize=1000)
def compute_ibc_hash(path: str, base_denom: str) -> str:
    """SHA-256 of the full denom path, as defined by ICS-20"""
    full_path = f"{path}/{base_denom}" if path else base_denom
    return hashlib.sha256(full_path.encode()).hexdigest().upper()


def parse_path(path: str) -> list[tuple[str, str]]:
    """Split a trace path like 'transfer/channel-0/transfer/channel-3' into (port, channel) hops"""
    if not path:
        return []
    segments = path.split("/")
    if len(segments) % 2 or not all(segments):
        raise ValueError(f"Invalid IBC trace path: {path!r}")
    return list(zip(segments[::2], segments[1::2]))


def split_full_path(full_path: str) -> tuple[str, str]:
    """Split a full denom path into (path, base_denom).

    Leading `port/channel-N` pairs form the path; the rest (which may contain slashes,
    e.g. 'gamm/pool/1') is the base denom.
    """
    segments = full_path.split("/")
    n_path = 0
    while n_path + 1 < len(segments) - 1 and _pat_channel_id.match(segments[n_path + 1]):
        n_path += 2
    return "/".join(segments[:n_path]), "/".join(segments[n_path:])


def format_channels(path: str) -> str:
    return path.replace(f"{DEFAULT_PORT}/", "")


def truncate_ibc_hash(ibc_hash: str, n_chars: int = 8) -> str:
    return f"{IBC_PREFIX}{ibc_hash[:n_chars].upper()}"
