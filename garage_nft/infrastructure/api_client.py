"""
Infrastructure Layer: Garage API Client Adapter
"""
import asyncio
import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import aiohttp
import structlog

from garage_nft.application.ports import IMarketClient
from garage_nft.domain import (
    ApiEnvelope,
    ApiError,
    Environment,
    MalformedResponseError,
    Network,
    TransportError,
    UpstreamHttpError,
)
from garage_nft.infrastructure.config import settings

logger = structlog.get_logger()

USER_AGENT = "garage-nft/0.1.0"


@dataclass(frozen=True)
class RawResponse:
    """Upstream answer forwarded byte for byte"""
    status: int
    content_type: str
    body: bytes


class GarageApiClient(IMarketClient):
    """
    Adapter for the Garage REST API using aiohttp.
    One call is one GET: no retry, no caching.
    """

    def __init__(
        self,
        base_urls: Optional[Mapping[Environment, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._base_urls = dict(base_urls or settings.base_urls)
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "GarageApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "User-Agent": USER_AGENT,
                    "Accept": "application/json, text/plain, */*",
                },
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    def base_url_for(self, environment: Environment) -> str:
        return self._base_urls[Environment(environment)].rstrip("/")

    def build_url(self, network: Network, endpoint: str, environment: Environment) -> str:
        return f"{self.base_url_for(environment)}/{Network(network).value}/{endpoint.lstrip('/')}"

    async def request(
        self,
        network: Network,
        endpoint: str,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        url = self.build_url(network, endpoint, environment)
        raw = await self._get(url)

        payload = _decode(raw.body)
        if not 200 <= raw.status < 300:
            error_info = ApiEnvelope.from_payload(payload).error if isinstance(payload, dict) else None
            logger.error("api_http_error", status=raw.status, url=url)
            raise UpstreamHttpError(raw.status, error_info.message if error_info else None)

        if not isinstance(payload, dict):
            logger.error("api_malformed_response", url=url, body=raw.body[:200].decode("utf-8", "replace"))
            raise MalformedResponseError(f"Invalid JSON envelope from {url}")

        envelope = ApiEnvelope.from_payload(payload)
        if not envelope.success:
            message = envelope.error.message if envelope.error else "Unknown API error"
            code = envelope.error.code if envelope.error else None
            logger.warning("api_error", url=url, message=message, code=code)
            raise ApiError(message, code)
        return envelope

    async def fetch_raw(
        self,
        network: Network,
        path: str,
        query: str = "",
        environment: Environment = Environment.PRODUCTION,
    ) -> RawResponse:
        """GET without interpreting the body; used by the dashboard passthrough"""
        url = self.build_url(network, path, environment)
        if query:
            url = f"{url}?{query}"
        return await self._get(url)

    async def _get(self, url: str) -> RawResponse:
        session = await self._get_session()
        logger.info("api_request", url=url)
        try:
            async with session.get(url) as response:
                body = await response.read()
                return RawResponse(
                    status=response.status,
                    content_type=response.headers.get("Content-Type", "application/json"),
                    body=body,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            reason = str(e) or type(e).__name__
            logger.error("api_transport_error", url=url, error=reason)
            raise TransportError(f"Request to {url} failed: {reason}") from e


def _decode(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return None
