from .blockchain_client import AsyncBlockchainClient

__all__ = [
    "AsyncBlockchainClient",
]
