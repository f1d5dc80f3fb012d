import asyncio
from typing import Callable, List, Optional, Tuple

import httpx
from loguru import logger

from .core.base import InvoiceResult, ResolutionSnapshot, ResolutionState
from .core.errors import InvoiceRequestFailed, MalformedInvoiceResponse
from .core.settings import settings
from .lnurl.address import parse_address
from .lnurl.cache import PayParametersCache
from .lnurl.invoice import InvoiceRequester
from .lnurl.resolver import EndpointResolver
from .qr import QRRenderer

Subscriber = Callable[[ResolutionSnapshot], None]


def select_address(looked_up: Optional[str], default: Optional[str] = None) -> str:
    """Pick the address to pay for a payee.

    `looked_up` is what the directory returned for the payee, None (or empty)
    when it has no address. Only then is the configured default used; an
    address that was found is returned as is, even if it is malformed.
    """
    if looked_up:
        return looked_up
    return default or settings.default_lightning_address


class ResolutionController:
    """Turns (lightning address, amount) into a rendered invoice.

    Every call to `resolve_and_render` supersedes the calls before it: their
    in-flight requests are cancelled and their outcomes are never committed,
    so only the most recent call can change the observable state.
    """

    resolver: EndpointResolver
    requester: InvoiceRequester
    renderer: QRRenderer

    def __init__(
        self,
        resolver: Optional[EndpointResolver] = None,
        requester: Optional[InvoiceRequester] = None,
        renderer: Optional[QRRenderer] = None,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[PayParametersCache] = None,
    ):
        self._owns_client = client is None and (resolver is None or requester is None)
        if self._owns_client:
            client = httpx.AsyncClient(
                verify=settings.lnurl_verify_tls,
                follow_redirects=True,
                timeout=settings.lnurl_timeout,
            )
        self.client = client
        self.resolver = resolver or EndpointResolver(cache=cache, client=client)
        self.requester = requester or InvoiceRequester(client=client)
        self.renderer = renderer or QRRenderer()

        self._sequence = 0
        self._inflight: Optional[asyncio.Task] = None
        self._snapshot = ResolutionSnapshot()
        self._subscribers: List[Subscriber] = []
        self._last_request: Optional[Tuple[str, int, Optional[str]]] = None

    @property
    def snapshot(self) -> ResolutionSnapshot:
        return self._snapshot

    @property
    def state(self) -> ResolutionState:
        return self._snapshot.state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _commit(self, snapshot: ResolutionSnapshot) -> None:
        self._snapshot = snapshot
        logger.trace(f"Resolution #{snapshot.sequence}: {snapshot.state}")
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.exception(f"Error in resolution subscriber: {e}")

    def _superseded(self, sequence: int) -> bool:
        return sequence != self._sequence

    async def _pipeline(
        self, address: str, amount_sats: int, comment: Optional[str]
    ) -> InvoiceResult:
        parsed = parse_address(address)
        params = await self.resolver.resolve(parsed)
        try:
            response = await self.requester.request(
                params, amount_sats, comment=comment
            )
        except (InvoiceRequestFailed, MalformedInvoiceResponse):
            # the callback may have moved, discover it again on the next attempt
            self.resolver.forget(parsed)
            raise
        qr_code = self.renderer.render(response.payment_request)
        return InvoiceResult(
            address=str(parsed),
            amount_sats=amount_sats,
            payment_request=response.payment_request,
            qr_code=qr_code,
            success_action=response.success_action,
        )

    async def resolve_and_render(
        self, address: str, amount_sats: int, comment: Optional[str] = None
    ) -> Optional[InvoiceResult]:
        """Resolve `address` and render an invoice for `amount_sats`.

        Returns None if a newer call started before this one finished.
        Errors of calls that were not superseded are raised unchanged.
        """
        self._sequence += 1
        sequence = self._sequence
        self._last_request = (address, amount_sats, comment)
        if self._inflight and not self._inflight.done():
            logger.debug(f"Resolution #{sequence} supersedes an in-flight request.")
            self._inflight.cancel()

        self._commit(
            ResolutionSnapshot(state=ResolutionState.RESOLVING, sequence=sequence)
        )
        logger.debug(f"Resolution #{sequence}: {amount_sats} sats to {address}")

        task = asyncio.ensure_future(self._pipeline(address, amount_sats, comment))
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            cancelled_from_outside = current is not None and current.cancelling() > 0
            if self._superseded(sequence):
                if cancelled_from_outside:
                    raise
                logger.debug(f"Resolution #{sequence} superseded.")
                return None
            self._commit(
                ResolutionSnapshot(state=ResolutionState.IDLE, sequence=sequence)
            )
            raise
        except Exception as e:
            if self._superseded(sequence):
                logger.debug(f"Resolution #{sequence} superseded, dropping error: {e}")
                return None
            logger.warning(f"Resolution #{sequence} failed: {e}")
            self._commit(
                ResolutionSnapshot(
                    state=ResolutionState.FAILED, sequence=sequence, error=e
                )
            )
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

        if self._superseded(sequence):
            logger.debug(f"Resolution #{sequence} superseded.")
            return None
        self._commit(
            ResolutionSnapshot(
                state=ResolutionState.READY, sequence=sequence, result=result
            )
        )
        return result

    async def retry(self) -> Optional[InvoiceResult]:
        """Re-run the last resolution with the same inputs."""
        if self._last_request is None:
            raise RuntimeError("nothing to retry")
        return await self.resolve_and_render(*self._last_request)

    async def aclose(self) -> None:
        if self._inflight and not self._inflight.done():
            self._inflight.cancel()
        if self._owns_client and self.client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()
