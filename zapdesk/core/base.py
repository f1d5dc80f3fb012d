import time
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# 1 sat = 1000 msat
MSAT_PER_SAT = 1000


def sat_to_msat(amount_sats: int) -> int:
    return amount_sats * MSAT_PER_SAT


class Address(BaseModel):
    """
    A lightning address `local_part@domain` (LUD-16)
    """

    model_config = ConfigDict(frozen=True)

    local_part: str
    domain: str

    @property
    def key(self) -> str:
        return f"{self.local_part}@{self.domain}".lower()

    def __str__(self) -> str:
        return f"{self.local_part}@{self.domain}"


# ------- LNURL-PAY -------


class PayParameters(BaseModel):
    """
    Parameters of a payRequest (LUD-06) as returned by the discovery endpoint.
    All amounts are in millisats.
    """

    model_config = ConfigDict(frozen=True)

    callback: str
    min_sendable: int = Field(ge=0)
    max_sendable: int = Field(ge=0)
    metadata: str
    metadata_hash: str
    comment_allowed: int = Field(default=0, ge=0)
    tag: str = "payRequest"

    @model_validator(mode="after")
    def check_sendable_range(self) -> "PayParameters":
        if self.max_sendable < self.min_sendable:
            raise ValueError("maxSendable is smaller than minSendable")
        return self

    @property
    def min_sats(self) -> int:
        return -(-self.min_sendable // MSAT_PER_SAT)

    @property
    def max_sats(self) -> int:
        return self.max_sendable // MSAT_PER_SAT

    def accepts(self, amount_msat: int) -> bool:
        return self.min_sendable <= amount_msat <= self.max_sendable


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    params: PayParameters
    fetched_at: float = Field(default_factory=time.monotonic)

    def is_stale(self, ttl: float, now: float) -> bool:
        return now - self.fetched_at >= ttl


class CallbackResponse(BaseModel):
    """
    Invoice returned by a payRequest callback
    """

    model_config = ConfigDict(frozen=True)

    payment_request: str
    success_action: Optional[Dict[str, Any]] = None


class InvoiceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    amount_sats: int
    payment_request: str
    qr_code: str  # data:image/png;base64,...
    success_action: Optional[Dict[str, Any]] = None


# ------- RESOLUTION STATE -------


class ResolutionState(Enum):
    IDLE = "IDLE"
    RESOLVING = "RESOLVING"
    READY = "READY"
    FAILED = "FAILED"

    def __str__(self):
        return self.name


class ResolutionSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    state: ResolutionState = ResolutionState.IDLE
    sequence: int = 0
    result: Optional[InvoiceResult] = None
    error: Optional[Exception] = None

    @property
    def ready(self) -> bool:
        return self.state == ResolutionState.READY

    @property
    def failed(self) -> bool:
        return self.state == ResolutionState.FAILED


# ------- DIRECTORY -------


class AgentProfile(BaseModel):
    name: str
    email: str
    lightning_address: Optional[str] = None
    avatar_url: Optional[str] = None
