from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from ..controller import ResolutionController, select_address
from ..core.base import InvoiceResult
from ..core.errors import DirectoryLookupError, ResolutionSuperseded
from ..core.settings import settings
from ..directory import ZendeskDirectory
from ..lnurl.address import parse_address
from ..lnurl.invoice import InvoiceRequester
from ..lnurl.resolver import EndpointResolver
from ..qr import QRRenderer
from .responses import (
    AgentResponse,
    InfoResponse,
    ParamsResponse,
    TipCommentRequest,
    TipCommentResponse,
)

router: APIRouter = APIRouter(prefix="/api")


class Engine:
    """Components shared by all requests of the API.

    Requests share the discovery cache and the HTTP connection pool, but each
    one gets its own controller so that unrelated requests never supersede
    each other.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(
            verify=settings.lnurl_verify_tls,
            follow_redirects=True,
            timeout=settings.lnurl_timeout,
        )
        self.resolver = EndpointResolver(client=self.client)
        self.requester = InvoiceRequester(client=self.client)
        self.renderer = QRRenderer()
        self.directory = ZendeskDirectory(client=self.client)

    def controller(self) -> ResolutionController:
        return ResolutionController(
            resolver=self.resolver, requester=self.requester, renderer=self.renderer
        )

    async def aclose(self) -> None:
        await self.client.aclose()


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


@router.get("/info", name="Information", response_model=InfoResponse)
async def info(engine: Engine = Depends(get_engine)) -> InfoResponse:
    return InfoResponse(
        version=settings.version,
        default_lightning_address=settings.default_lightning_address,
        directory_configured=engine.directory.configured,
    )


@router.get(
    "/get-agent",
    name="Agent lightning address",
    summary="Look up the lightning address of a support agent.",
    response_model=AgentResponse,
)
async def get_agent(
    agent_email: Optional[str] = Query(default=None, description="Agent e-mail"),
    engine: Engine = Depends(get_engine),
):
    if not agent_email:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "agent_email parameter required"},
        )
    fallback = select_address(None)
    if not engine.directory.configured:
        logger.error("Zendesk credentials not configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Server configuration error",
                "lightning_address": fallback,
            },
        )

    try:
        agent = await engine.directory.lookup(agent_email)
    except DirectoryLookupError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": e.detail, "lightning_address": fallback},
        )
    if agent is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Agent not found", "lightning_address": fallback},
        )

    return AgentResponse(
        agent_name=agent.name,
        agent_email=agent.email,
        lightning_address=select_address(agent.lightning_address),
        avatar_url=agent.avatar_url,
    )


@router.get(
    "/params",
    name="Pay parameters",
    summary="Discover the payRequest behind a lightning address.",
    response_model=ParamsResponse,
)
async def params(
    address: str = Query(default=..., description="Lightning address"),
    engine: Engine = Depends(get_engine),
) -> ParamsResponse:
    parsed = parse_address(address)
    pay_params = await engine.resolver.resolve(parsed)
    return ParamsResponse(
        address=str(parsed),
        params=pay_params,
        min_sats=pay_params.min_sats,
        max_sats=pay_params.max_sats,
    )


@router.get(
    "/invoice",
    name="Request invoice",
    summary="Resolve a lightning address into an invoice and its QR code.",
    response_model=InvoiceResult,
)
async def invoice(
    amount: int = Query(default=..., description="Amount in sats"),
    address: Optional[str] = Query(
        default=None,
        description="Lightning address (None for the default address)",
    ),
    comment: Optional[str] = Query(default=None, description="Comment for the payee"),
    engine: Engine = Depends(get_engine),
) -> InvoiceResult:
    controller = engine.controller()
    result = await controller.resolve_and_render(
        select_address(address), amount, comment=comment
    )
    if result is None:
        raise ResolutionSuperseded()
    return result


@router.post(
    "/tip-comment",
    name="Record tip",
    summary="Add a private comment about a sent tip to a ticket.",
    response_model=TipCommentResponse,
)
async def tip_comment(
    payload: TipCommentRequest, engine: Engine = Depends(get_engine)
) -> TipCommentResponse:
    comment = await engine.directory.post_tip_comment(
        payload.ticket_id, payload.amount_sats, payload.message
    )
    return TipCommentResponse(ticket_id=payload.ticket_id, comment=comment)
