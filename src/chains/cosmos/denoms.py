"""Static registry of well-known native denominations and metadata inference for the rest"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import NamedTuple, Optional

from .ibc_denoms import IBC_PREFIX

DEFAULT_DECIMALS = 6
_MICRO_DECIMALS = 6
_ATTO_DECIMALS = 18


@dataclass(frozen=True)
class DenomMetadata:
    denom: str
    display_name: str
    symbol: str
    decimals: int
    is_ibc: bool
    ibc_hash: Optional[str] = None

    def to_data(self) -> dict:
        return {
            "denom": self.denom,
            "display_name": self.display_name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "is_ibc": self.is_ibc,
            "ibc_hash": self.ibc_hash,
        }


class NativeDenom(NamedTuple):
    name: str
    symbol: str
    decimals: int


KNOWN_DENOMS: dict[str, NativeDenom] = {
    "ujuno": NativeDenom("Juno", "JUNO", 6),
    "uatom": NativeDenom("Cosmos Hub", "ATOM", 6),
    "uosmo": NativeDenom("Osmosis", "OSMO", 6),
    "uakt": NativeDenom("Akash", "AKT", 6),
    "ustars": NativeDenom("Stargaze", "STARS", 6),
    "untrn": NativeDenom("Neutron", "NTRN", 6),
    "aevmos": NativeDenom("Evmos", "EVMOS", 18),
    "inj": NativeDenom("Injective", "INJ", 18),
    "axl": NativeDenom("Axelar", "AXL", 6),
    "umfx": NativeDenom("Manifest", "MFX", 6),
    "upoa": NativeDenom("POA", "POA", 6),
}


def lookup_native_denom(denom: str) -> DenomMetadata | None:
    """Registry lookup only; None for anything not in KNOWN_DENOMS"""
    if (known := KNOWN_DENOMS.get(denom.lower())) is None:
        return None
    return DenomMetadata(
        denom=denom,
        display_name=known.name,
        symbol=known.symbol,
        decimals=known.decimals,
        is_ibc=False,
    )


def extract_symbol(base_denom: str) -> str:
    """Symbol from a base denom, stripping micro (u) and atto (a) prefixes"""
    if base_denom[:1] in ("u", "a") and len(base_denom) > 1:
        return base_denom[1:].upper()
    return base_denom.upper()


def guess_decimals(base_denom: str) -> int:
    if base_denom.startswith("u"):
        return _MICRO_DECIMALS
    if base_denom.startswith("a"):
        return _ATTO_DECIMALS
    return DEFAULT_DECIMALS


def get_denom_metadata(denom: str) -> DenomMetadata:
    """Best-effort metadata without any I/O.

    IBC denoms get placeholder metadata (raw denom as symbol); resolving them needs the chain.
    """
    if denom.startswith(IBC_PREFIX):
        return DenomMetadata(
            denom=denom,
            display_name=denom,
            symbol=denom,
            decimals=DEFAULT_DECIMALS,
            is_ibc=True,
            ibc_hash=denom[len(IBC_PREFIX) :],
        )
    if (metadata := lookup_native_denom(denom)) is not None:
        return metadata
    if denom[:1] in ("u", "a") and len(denom) > 1:
        symbol = extract_symbol(denom)
        return DenomMetadata(denom, symbol, symbol, guess_decimals(denom), is_ibc=False)
    return DenomMetadata(denom, denom, denom.upper(), decimals=0, is_ibc=False)


def format_denom_amount(
    amount: int | str | Decimal,
    decimals: int,
    max_decimals: int = 2,
    abbreviated: bool = False,
) -> str:
    """Format an amount given in base units, e.g. 1234500 with 6 decimals -> '1.23'"""
    try:
        converted = Decimal(amount) / 10 ** decimals
    except (InvalidOperation, ValueError, TypeError):
        return "0"
    if not converted.is_finite():
        return "0"
    if abbreviated:
        for threshold, suffix in ((10 ** 9, "B"), (10 ** 6, "M"), (10 ** 3, "K")):
            if converted >= threshold:
                return f"{converted / threshold:.{max_decimals}f}{suffix}"
    return f"{converted:.{max_decimals}f}"
