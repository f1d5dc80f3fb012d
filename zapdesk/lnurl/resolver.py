import hashlib
from typing import Any, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from ..core.base import Address, PayParameters
from ..core.errors import EndpointUnreachable, MalformedPayParameters
from ..core.settings import settings
from .address import discovery_url
from .cache import PayParametersCache


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_pay_parameters(data: Any) -> PayParameters:
    """Validate a LUD-06 payRequest response body."""
    if not isinstance(data, dict):
        raise MalformedPayParameters("payRequest response is not a JSON object")
    if str(data.get("status", "")).upper() == "ERROR":
        raise MalformedPayParameters(
            f"LNURL service returned an error: {data.get('reason', 'unknown reason')}"
        )

    tag = data.get("tag", "payRequest")
    if tag != "payRequest":
        raise MalformedPayParameters(
            f"Invalid LNURL tag {tag!r}. Only payRequest is supported."
        )

    callback = data.get("callback")
    if not isinstance(callback, str) or not callback.startswith(
        ("https://", "http://")
    ):
        raise MalformedPayParameters("payRequest has no valid callback URL")

    min_sendable = data.get("minSendable")
    max_sendable = data.get("maxSendable")
    if not _is_int(min_sendable) or not _is_int(max_sendable):
        raise MalformedPayParameters("minSendable and maxSendable must be integers")

    metadata = data.get("metadata")
    if not isinstance(metadata, str):
        raise MalformedPayParameters("payRequest metadata must be a string")

    comment_allowed = data.get("commentAllowed", 0)
    if comment_allowed is None:
        comment_allowed = 0
    if not _is_int(comment_allowed):
        raise MalformedPayParameters("commentAllowed must be an integer")

    try:
        return PayParameters(
            callback=callback,
            min_sendable=min_sendable,
            max_sendable=max_sendable,
            metadata=metadata,
            metadata_hash=hashlib.sha256(metadata.encode("utf-8")).hexdigest(),
            comment_allowed=comment_allowed,
            tag=tag,
        )
    except ValidationError as e:
        raise MalformedPayParameters(f"invalid payRequest parameters: {e}")


class EndpointResolver:
    """Discovers the payRequest parameters behind a lightning address.

    Results are kept in a `PayParametersCache` so that changing the amount
    does not trigger another discovery request.
    """

    cache: PayParametersCache
    client: httpx.AsyncClient

    def __init__(
        self,
        cache: Optional[PayParametersCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.timeout = timeout or settings.lnurl_timeout
        if cache is None:
            cache = PayParametersCache(
                ttl=settings.lnurl_cache_ttl,
                max_entries=settings.lnurl_cache_max_entries,
            )
        self.cache = cache
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            verify=settings.lnurl_verify_tls,
            follow_redirects=True,
            timeout=self.timeout,
        )

    async def resolve(self, address: Address) -> PayParameters:
        cached = self.cache.get(address.key)
        if cached is not None:
            logger.debug(f"Using cached payRequest for {address.key}.")
            return cached

        url = discovery_url(address)
        logger.debug(f"Fetching payRequest for {address.key} from {url}")
        try:
            r = await self.client.get(url, timeout=self.timeout)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"LNURL endpoint {url} returned {e.response.status_code}")
            raise EndpointUnreachable(
                f"LNURL endpoint {url} returned HTTP {e.response.status_code}"
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Error fetching LNURL {url}: {e}")
            raise EndpointUnreachable(f"Failed to connect to {url} due to: {e}")

        try:
            data = r.json()
        except ValueError:
            raise MalformedPayParameters(
                f"Received invalid response from {url}: {r.text[:200]}"
            )
        logger.trace(f"payRequest response: {data}")

        params = parse_pay_parameters(data)
        self.cache.set(address.key, params)
        return params

    def forget(self, address: Address) -> None:
        """Drop the cached payRequest of `address` so the next resolve fetches it."""
        logger.debug(f"Forgetting cached payRequest for {address.key}.")
        self.cache.invalidate(address.key)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
