from typing import Optional

from pydantic import BaseModel

from ..core.base import PayParameters


class AgentResponse(BaseModel):
    success: bool = True
    agent_name: str
    agent_email: str
    lightning_address: str
    avatar_url: Optional[str] = None


class AgentErrorResponse(BaseModel):
    error: str
    lightning_address: str


class ParamsResponse(BaseModel):
    address: str
    params: PayParameters
    min_sats: int
    max_sats: int


class InfoResponse(BaseModel):
    version: str
    default_lightning_address: str
    directory_configured: bool


class TipCommentRequest(BaseModel):
    ticket_id: int
    amount_sats: int
    message: Optional[str] = None


class TipCommentResponse(BaseModel):
    ticket_id: int
    comment: str
