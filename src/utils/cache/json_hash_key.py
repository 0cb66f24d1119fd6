import json

from cachetools.keys import hashkey


def _hashable(arg):
    try:
        hash(arg)
    except TypeError:
        return json.dumps(arg, sort_keys=True, default=str)
    return arg


def json_hashkey(*args, **kwargs):
    """Cache key that uses JSON serialization as fallback for non-hashable arguments"""
    return hashkey(
        *(_hashable(arg) for arg in args),
        **{k: _hashable(v) for k, v in kwargs.items()},
    )
