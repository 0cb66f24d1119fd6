"""httpx AsyncClient with a concurrency limit and optional retries on transient errors"""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable

import httpx
from httpx._types import URLTypes

import configs

log = logging.getLogger(__name__)


DEFAULT_N_TRIES = 1
DEFAULT_BACKOFF_FACTOR = 0.5
DEFAULT_STATUS_FORCELIST = (500, 502, 503, 504)


class AsyncClient(httpx.AsyncClient):
    def __init__(
        self,
        n_tries: int = DEFAULT_N_TRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        status_forcelist: Iterable[int] = DEFAULT_STATUS_FORCELIST,
        max_concurrent_requests: int = configs.MAX_CONCURRENT_REQUESTS,
        **kwargs,
    ):
        kwargs.setdefault("timeout", configs.HTTP_TIMEOUT)
        if "transport" not in kwargs:
            kwargs.setdefault("http2", True)
        super().__init__(**kwargs)
        self.n_tries = n_tries
        self.backoff_factor = backoff_factor
        self.status_forcelist = tuple(status_forcelist)
        self._semaphore = asyncio.Semaphore(max_concurrent_requests)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={str(self.base_url)})"

    async def get(
        self,
        url: URLTypes,
        n_tries: int = None,
        supress_logs: bool = False,
        **kwargs,
    ) -> httpx.Response:
        """httpx GET, retried on transient errors if n_tries > 1"""
        async with self._semaphore:
            return await _send_request(
                self,
                "GET",
                url,
                n_tries=self.n_tries if n_tries is None else n_tries,
                supress_logs=supress_logs,
                **kwargs,
            )

    async def check_connection(self, check_url: URLTypes) -> bool:
        try:
            await self.get(check_url, n_tries=1)
        except Exception as e:
            log.warning(f"Connection failed ({e!r}): base_url={str(self.base_url)}")
            return False
        else:
            log.debug(f"Connection OK: base_url={str(self.base_url)}")
            return True


async def _send_request(
    client: AsyncClient,
    method: str,
    url: URLTypes,
    n_tries: int,
    supress_logs: bool,
    **kwargs,
) -> httpx.Response:
    """httpx request with retries.
    inspired by https://www.peterbe.com/plog/best-practice-with-retries-with-requests"""
    if n_tries <= 1:
        res = await client.request(method, url, **kwargs)
        res.raise_for_status()
        return res
    errors: list[Exception] = []
    for i in range(n_tries):
        try:
            res = await client.request(method, url, **kwargs)
            res.raise_for_status()
            return res
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code not in client.status_forcelist:
                raise
            if not supress_logs:
                log.debug(
                    f"Error on http {method}, url={str(e.request.url)}, "
                    f"{status_code=}, response={e.response.text!r}"
                )
            errors.append(e)
        except httpx.TransportError as e:
            if not supress_logs:
                log.debug(f"Error on http {method} {url=} ({e!r})")
            errors.append(e)
        await asyncio.sleep((1 + client.backoff_factor) ** i - 1)
    raise httpx.TransportError(f"httpx {method} {url} failed after {n_tries=}, {errors=}")
