from __future__ import annotations

import asyncio
import logging

import httpx

import configs
import utils
from chains.cosmos.chain_configs import CHAIN_CONFIGS
from common.blockchain_client import AsyncBlockchainClient

from .api_bank import BankApi
from .api_chain import ChainApi
from .api_ibc import IbcApi
from .api_indexer import IndexerApi

log = logging.getLogger(__name__)


class CosmosClient(AsyncBlockchainClient):
    """REST client for a Cosmos SDK chain (LCD) and its PostgREST indexer.

    `transport` replaces the network layer of both HTTP clients, e.g. with an
    `httpx.MockTransport` in tests.
    """

    lcd_http_client: utils.ahttp.AsyncClient
    postgrest_http_client: utils.ahttp.AsyncClient

    def __init__(
        self,
        lcd_uri: str = configs.CHAIN_REST_URI,
        postgrest_uri: str = configs.POSTGREST_URI,
        n_tries: int = configs.CHAIN_REST_N_TRIES,
        timeout: float = configs.HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.lcd_uri = lcd_uri
        self.postgrest_uri = postgrest_uri
        self.n_tries = n_tries
        self.timeout = timeout
        self._transport = transport

        self.bank = BankApi(self)
        self.chain = ChainApi(self)
        self.ibc = IbcApi(self)
        self.indexer = IndexerApi(self)

    @classmethod
    def from_chain_id(cls, chain_id: str | None, **kwargs) -> CosmosClient:
        """Client for chain_id, using its configured REST endpoint as LCD URI when known"""
        config = CHAIN_CONFIGS.get(chain_id) if chain_id else None
        if config is not None and config.rest_endpoint is not None:
            kwargs.setdefault("lcd_uri", config.rest_endpoint)
        elif chain_id:
            log.warning(f"No REST endpoint configured for {chain_id=}, using default LCD URI")
        return cls(**kwargs)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(lcd_uri={self.lcd_uri})"

    def _new_http_client(self, base_url: str) -> utils.ahttp.AsyncClient:
        kwargs: dict = {"base_url": base_url, "n_tries": self.n_tries, "timeout": self.timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return utils.ahttp.AsyncClient(**kwargs)

    async def start(self):
        self.lcd_http_client = self._new_http_client(self.lcd_uri)
        self.postgrest_http_client = self._new_http_client(self.postgrest_uri)
        await super().start()

    async def check_connections(self) -> bool:
        results = await asyncio.gather(
            self.lcd_http_client.check_connection("cosmos/base/tendermint/v1beta1/node_info"),
            self.postgrest_http_client.check_connection(""),
        )
        return all(results)

    async def close(self):
        log.debug(f"Closing {self=}")
        await asyncio.gather(self.lcd_http_client.aclose(), self.postgrest_http_client.aclose())
        self.started = False
