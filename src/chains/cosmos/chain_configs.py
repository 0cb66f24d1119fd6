from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

log = logging.getLogger(__name__)


class Feature(str, Enum):
    evm = "evm"
    ibc = "ibc"
    wasm = "wasm"
    custom_modules = "customModules"

    @classmethod
    def parse(cls, name: str | Feature) -> Feature | None:
        """Accept members, values ('customModules') and member names ('custom_modules')"""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            return cls.__members__.get(name)


@dataclass(frozen=True)
class ChainFeatures:
    evm: bool = False
    ibc: bool = False
    wasm: bool = False
    custom_modules: tuple[str, ...] = ()

    def to_data(self) -> dict:
        return {
            "evm": self.evm,
            "ibc": self.ibc,
            "wasm": self.wasm,
            "customModules": list(self.custom_modules),
        }


NO_FEATURES = ChainFeatures()


@dataclass(frozen=True)
class ChainConfig:
    name: str
    native_denom: str
    native_symbol: str
    decimals: int
    features: ChainFeatures = field(default_factory=ChainFeatures)
    rest_endpoint: Optional[str] = None


CHAIN_CONFIGS: dict[str, ChainConfig] = {
    "manifest-1": ChainConfig(
        name="Manifest Network",
        native_denom="umfx",
        native_symbol="MFX",
        decimals=6,
        features=ChainFeatures(evm=True, ibc=True, wasm=False),
        rest_endpoint="https://api.manifest.nodestake.top",
    ),
    "juno-1": ChainConfig(
        name="Juno Network",
        native_denom="ujuno",
        native_symbol="JUNO",
        decimals=6,
        features=ChainFeatures(evm=False, ibc=True, wasm=True),
        rest_endpoint="https://api.juno.strange.love",
    ),
    "osmosis-1": ChainConfig(
        name="Osmosis",
        native_denom="uosmo",
        native_symbol="OSMO",
        decimals=6,
        features=ChainFeatures(
            evm=False,
            ibc=True,
            wasm=True,
            custom_modules=("poolmanager", "gamm", "concentrated-liquidity"),
        ),
        rest_endpoint="https://lcd.osmosis.zone",
    ),
    "cosmoshub-4": ChainConfig(
        name="Cosmos Hub",
        native_denom="uatom",
        native_symbol="ATOM",
        decimals=6,
        features=ChainFeatures(evm=False, ibc=True, wasm=False),
        rest_endpoint="https://api.cosmos.network",
    ),
    "stargaze-1": ChainConfig(
        name="Stargaze",
        native_denom="ustars",
        native_symbol="STARS",
        decimals=6,
        features=ChainFeatures(evm=False, ibc=True, wasm=True, custom_modules=("nft",)),
        rest_endpoint="https://rest.stargaze-apis.com",
    ),
    "evmos_9001-2": ChainConfig(
        name="Evmos",
        native_denom="aevmos",
        native_symbol="EVMOS",
        decimals=18,
        features=ChainFeatures(evm=True, ibc=True, wasm=False, custom_modules=("erc20", "claims")),
        rest_endpoint="https://evmos-api.polkachu.com",
    ),
    "neutron-1": ChainConfig(
        name="Neutron",
        native_denom="untrn",
        native_symbol="NTRN",
        decimals=6,
        features=ChainFeatures(
            evm=False,
            ibc=True,
            wasm=True,
            custom_modules=("interchainqueries", "interchaintxs"),
        ),
        rest_endpoint="https://api.neutron.strange.love",
    ),
}


def generate_chain_name(chain_id: str) -> str:
    if chain_id == "9001":
        return "EVM Testnet"
    if "testnet" in chain_id or "mainnet" in chain_id:
        return re.sub(r"\b\w", lambda m: m.group().upper(), chain_id.replace("-", " ", 1))
    return f"Chain {chain_id}"


def get_chain_config(chain_id: str) -> ChainConfig:
    """Known configuration for chain_id, or defaults for unknown chains"""
    if (config := CHAIN_CONFIGS.get(chain_id)) is not None:
        return config
    log.warning(f"{chain_id=} not found in CHAIN_CONFIGS, using defaults")
    return ChainConfig(
        name=generate_chain_name(chain_id),
        native_denom="unknown",
        native_symbol="UNKNOWN",
        decimals=6,
        features=ChainFeatures(evm=False, ibc=True, wasm=False),
    )


class ChainSpecificMessage(NamedTuple):
    is_custom: bool
    module_name: Optional[str] = None
    chain_recommendation: Optional[str] = None


def classify_message_type(message_type: str) -> ChainSpecificMessage:
    """Tell whether a message type URL needs a chain-specific module"""
    if "MsgEthereumTx" in message_type or "evm" in message_type:
        return ChainSpecificMessage(True, "evm", "This message type requires EVM module support")
    if "wasm" in message_type:
        return ChainSpecificMessage(True, "wasm", "This message type requires CosmWasm support")
    if "osmosis" in message_type:
        return ChainSpecificMessage(True, "osmosis-custom", "Osmosis-specific module")
    return ChainSpecificMessage(False)
