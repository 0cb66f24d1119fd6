from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from chains.cosmos.chain_configs import (
    CHAIN_CONFIGS,
    NO_FEATURES,
    ChainFeatures,
    Feature,
    generate_chain_name,
)
from chains.cosmos.client import CosmosClient
from chains.cosmos.denoms import DEFAULT_DECIMALS, get_denom_metadata
from exceptions import ChainDiscoveryError, ResolutionError

log = logging.getLogger(__name__)

# Modules every Cosmos SDK / ibc-go chain may ship; anything else counts as a custom module
STANDARD_MODULES = frozenset(
    (
        "accounts",
        "auth",
        "authz",
        "bank",
        "capability",
        "circuit",
        "consensus",
        "crisis",
        "distribution",
        "epochs",
        "evidence",
        "feegrant",
        "genutil",
        "gov",
        "group",
        "mint",
        "params",
        "protocolpool",
        "slashing",
        "staking",
        "upgrade",
        "vesting",
        # ibc-go and middlewares
        "ibc",
        "transfer",
        "interchainaccounts",
        "feeibc",
        "packetfowardmiddleware",
        "ratelimit",
        # evm / wasm
        "evm",
        "feemarket",
        "precisebank",
        "wasm",
    )
)
_EVM_MODULES = frozenset(("evm",))
_IBC_MODULES = frozenset(("ibc", "transfer"))
_WASM_MODULES = frozenset(("wasm",))


@dataclass(frozen=True)
class ChainCapabilities:
    chain_id: str
    chain_name: str
    base_denom: str
    display_denom: str
    decimals: int
    features: ChainFeatures

    def to_data(self) -> dict:
        return {
            "chain_id": self.chain_id,
            "chain_name": self.chain_name,
            "base_denom": self.base_denom,
            "display_denom": self.display_denom,
            "decimals": self.decimals,
            "features": self.features.to_data(),
        }


class ResolverState(str, Enum):
    uninitialized = "uninitialized"
    loading = "loading"
    resolved = "resolved"
    failed = "failed"


def features_from_modules(module_names: Iterable[str]) -> ChainFeatures:
    names = set(module_names)
    return ChainFeatures(
        evm=bool(names & _EVM_MODULES),
        ibc=bool(names & _IBC_MODULES),
        wasm=bool(names & _WASM_MODULES),
        custom_modules=tuple(sorted(names - STANDARD_MODULES)),
    )


async def discover_chain(client: CosmosClient) -> ChainCapabilities:
    try:
        chain_id, module_names, bond_denom = await asyncio.gather(
            client.chain.get_chain_id(),
            client.chain.get_module_names(),
            client.chain.get_bond_denom(),
        )
    except ResolutionError as e:
        raise ChainDiscoveryError(f"Could not query chain info from {client}: {e!r}") from e
    config = CHAIN_CONFIGS.get(chain_id)

    if module_names is not None:
        features = features_from_modules(module_names)
    elif config is not None:
        log.info(f"Using known features of {chain_id=}")
        features = config.features
    else:
        features = NO_FEATURES

    base_denom = bond_denom or (config.native_denom if config else None)
    if base_denom is None:
        base_denom, display_denom, decimals = "unknown", "UNKNOWN", DEFAULT_DECIMALS
    elif config is not None and base_denom == config.native_denom:
        display_denom, decimals = config.native_symbol, config.decimals
    else:
        metadata = get_denom_metadata(base_denom)
        display_denom, decimals = metadata.symbol, metadata.decimals

    return ChainCapabilities(
        chain_id=chain_id,
        chain_name=config.name if config else generate_chain_name(chain_id),
        base_denom=base_denom,
        display_denom=display_denom,
        decimals=decimals,
        features=features,
    )


class ChainCapabilityResolver:
    """Discovers the connected chain's optional modules once per process.

    Until discovery finishes, and forever if it fails, every feature reads as unsupported.
    """

    def __init__(self, client: CosmosClient):
        self.client = client
        self.state = ResolverState.uninitialized
        self.capabilities: ChainCapabilities | None = None
        self._init_task: asyncio.Task | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(state={self.state.value}, client={self.client})"

    @property
    def is_loading(self) -> bool:
        return self.state in (ResolverState.uninitialized, ResolverState.loading)

    @property
    def features(self) -> ChainFeatures:
        return NO_FEATURES if self.capabilities is None else self.capabilities.features

    @property
    def custom_modules(self) -> tuple[str, ...]:
        return self.features.custom_modules

    async def initialize(self):
        if self._init_task is None:
            self.state = ResolverState.loading
            self._init_task = asyncio.ensure_future(self._discover())
        await asyncio.shield(self._init_task)

    async def _discover(self):
        try:
            capabilities = await discover_chain(self.client)
        except ChainDiscoveryError as e:
            log.warning(f"Chain discovery failed, no optional features enabled ({e!r})")
            self.state = ResolverState.failed
            return
        except Exception:
            log.exception("Unexpected error on chain discovery, no optional features enabled")
            self.state = ResolverState.failed
            return
        self.capabilities = capabilities
        self.state = ResolverState.resolved
        log.info(
            f"Discovered chain {capabilities.chain_id} ({capabilities.chain_name})",
            extra={"data": capabilities.to_data()},
        )

    def has_custom_modules(self) -> bool:
        return len(self.custom_modules) > 0

    def has_feature(self, name: str | Feature) -> bool:
        if (feature := Feature.parse(name)) is None:
            return False
        if feature is Feature.custom_modules:
            return self.has_custom_modules()
        return getattr(self.features, feature.name)
