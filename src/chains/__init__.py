from .cosmos import CosmosClient

__all__ = [
    "CosmosClient",
]
