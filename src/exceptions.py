from __future__ import annotations


class ChainDiscoveryError(Exception):
    pass


class MalformedHash(ValueError):
    def __init__(self, denom: str, *args) -> None:
        self.denom = denom
        super().__init__(f"Malformed IBC denom: {denom!r}", *args)


class ResolutionError(Exception):
    pass


class NotFound(ResolutionError):
    pass


class NetworkError(ResolutionError):
    def __init__(self, msg: str, status_code: int | None = None, *args) -> None:
        self.status_code = status_code
        super().__init__(msg, *args)


class MalformedResponse(ResolutionError):
    pass


class MalformedTrace(MalformedResponse):
    pass
