from typing import Optional

import httpx
from loguru import logger

from ..core.base import CallbackResponse, PayParameters, sat_to_msat
from ..core.errors import (
    AmountOutOfRange,
    InvoiceRequestFailed,
    MalformedInvoiceResponse,
)
from ..core.settings import settings


class InvoiceRequester:
    """Exchanges payRequest parameters and an amount for a bolt11 invoice.

    Invoices are amount-bound and single-use, nothing is cached here.
    """

    client: httpx.AsyncClient

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        min_length: Optional[int] = None,
    ):
        self.timeout = timeout or settings.lnurl_timeout
        self.min_length = min_length or settings.invoice_min_length
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            verify=settings.lnurl_verify_tls,
            follow_redirects=True,
            timeout=self.timeout,
        )

    async def request_invoice(
        self,
        params: PayParameters,
        amount_sats: int,
        comment: Optional[str] = None,
    ) -> str:
        response = await self.request(params, amount_sats, comment=comment)
        return response.payment_request

    async def request(
        self,
        params: PayParameters,
        amount_sats: int,
        comment: Optional[str] = None,
    ) -> CallbackResponse:
        if (
            not isinstance(amount_sats, int)
            or isinstance(amount_sats, bool)
            or amount_sats <= 0
        ):
            raise AmountOutOfRange(amount_sats, params.min_sendable, params.max_sendable)
        amount_msat = sat_to_msat(amount_sats)
        if not params.accepts(amount_msat):
            raise AmountOutOfRange(amount_sats, params.min_sendable, params.max_sendable)

        query = {"amount": str(amount_msat)}
        if comment and params.comment_allowed > 0:
            if len(comment) > params.comment_allowed:
                logger.warning(
                    f"Comment truncated to {params.comment_allowed} characters."
                )
            query["comment"] = comment[: params.comment_allowed]

        logger.debug(f"Requesting invoice for {amount_msat} msat from {params.callback}")
        try:
            # the callback may carry its own query parameters
            url = httpx.URL(params.callback).copy_merge_params(query)
            r = await self.client.get(url, timeout=self.timeout)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"LNURL callback returned {e.response.status_code}")
            raise InvoiceRequestFailed(
                f"LNURL callback returned HTTP {e.response.status_code}"
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Error fetching invoice: {e}")
            raise InvoiceRequestFailed(f"Error fetching invoice: {e}")

        try:
            data = r.json()
        except ValueError:
            raise MalformedInvoiceResponse(
                f"Received invalid response from callback: {r.text[:200]}"
            )
        logger.trace(f"Callback response: {data}")

        if not isinstance(data, dict):
            raise MalformedInvoiceResponse("callback response is not a JSON object")
        if str(data.get("status", "")).upper() == "ERROR":
            raise InvoiceRequestFailed(
                f"Error from LNURL service: {data.get('reason', 'unknown reason')}"
            )

        pr = data.get("pr")
        if not isinstance(pr, str) or not pr:
            raise MalformedInvoiceResponse("No payment request in response.")
        if len(pr) < self.min_length or not pr.lower().startswith("ln"):
            raise MalformedInvoiceResponse(f"Implausible payment request: {pr}")

        success_action = data.get("successAction")
        if not isinstance(success_action, dict):
            success_action = None

        return CallbackResponse(payment_request=pr, success_action=success_action)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
