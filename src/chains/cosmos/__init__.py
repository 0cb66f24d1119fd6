from .chain_configs import CHAIN_CONFIGS, ChainConfig, ChainFeatures, Feature
from .client import CosmosClient
from .denoms import DenomMetadata, get_denom_metadata, lookup_native_denom
from .ibc_denoms import DenomTrace, IbcChannelInfo, extract_ibc_hash

__all__ = [
    "CHAIN_CONFIGS",
    "ChainConfig",
    "ChainFeatures",
    "Feature",
    "CosmosClient",
    "DenomMetadata",
    "get_denom_metadata",
    "lookup_native_denom",
    "DenomTrace",
    "IbcChannelInfo",
    "extract_ibc_hash",
]
