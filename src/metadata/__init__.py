from .chain_capabilities import ChainCapabilities, ChainCapabilityResolver, ResolverState
from .denom_cache import DenomTraceStore
from .denom_resolver import DenomResolver
from .ibc_resolver import IbcResolver

__all__ = [
    "ChainCapabilities",
    "ChainCapabilityResolver",
    "ResolverState",
    "DenomTraceStore",
    "DenomResolver",
    "IbcResolver",
]
