from typing import Optional


class ZapdeskError(Exception):
    code: int
    detail: str

    def __init__(self, detail, code=0):
        super().__init__(detail)
        self.code = code
        self.detail = detail


class InvalidAddressFormat(ZapdeskError):
    detail = "invalid lightning address"
    code = 10001

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class EndpointUnreachable(ZapdeskError):
    detail = "LNURL endpoint unreachable"
    code = 11001

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class MalformedPayParameters(ZapdeskError):
    detail = "malformed payRequest response"
    code = 11002

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class AmountOutOfRange(ZapdeskError):
    code = 12001

    def __init__(self, amount_sats, min_sendable: int = 0, max_sendable: int = 0):
        self.amount_sats = amount_sats
        self.min_sendable = min_sendable
        self.max_sendable = max_sendable
        detail = (
            f"Amount {amount_sats} sats is out of range"
            f" [{min_sendable // 1000}, {max_sendable // 1000}] sats."
        )
        super().__init__(detail, code=self.code)


class InvoiceRequestFailed(ZapdeskError):
    detail = "invoice request failed"
    code = 12002

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class MalformedInvoiceResponse(ZapdeskError):
    detail = "malformed invoice response"
    code = 12003

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class EncodingFailed(ZapdeskError):
    detail = "payment request could not be encoded as a QR code"
    code = 13001

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class DirectoryLookupError(ZapdeskError):
    detail = "directory lookup failed"
    code = 20001

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class ResolutionSuperseded(ZapdeskError):
    detail = "resolution was superseded by a newer request"
    code = 14001

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)


class TicketCommentFailed(ZapdeskError):
    detail = "could not add the tip comment to the ticket"
    code = 20002

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail, code=self.code)
