from .async_client import CosmosClient

__all__ = [
    "CosmosClient",
]
