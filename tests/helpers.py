from typing import Union

from zapdesk.core.errors import ZapdeskError

ADDRESS = "agent@example.com"
DISCOVERY_URL = "https://example.com/.well-known/lnurlp/agent"
CALLBACK_URL = "https://example.com/cb"
METADATA = '[["text/plain","Tip your support agent"],["text/identifier","agent@example.com"]]'

PAY_REQUEST = {
    "tag": "payRequest",
    "callback": CALLBACK_URL,
    "minSendable": 1000,
    "maxSendable": 100000000,
    "metadata": METADATA,
    "commentAllowed": 32,
}

payment_request = (
    "lnbc10u1pjap7phpp50s9lzr3477j0tvacpfy2ucrs4q0q6cvn232ex7nt2zqxxxj8gxrsdpv2phhwetjv4jzqcneypqyc6t8dp6xu6twva2xjuzzda6qcqzzsxqrrsss"
    "p575z0n39w2j7zgnpqtdlrgz9rycner4eptjm3lz363dzylnrm3h4s9qyyssqfz8jglcshnlcf0zkw4qu8fyr564lg59x5al724kms3h6gpuhx9xrfv27tgx3l3u3cyf6"
    "3r52u0xmac6max8mdupghfzh84t4hfsvrfsqwnuszf"
)


async def assert_err(f, msg: Union[str, ZapdeskError, type]):
    """Compute f() and expect an error message 'msg' or an error of type 'msg'."""
    try:
        await f
    except Exception as exc:
        if isinstance(msg, type):
            if not isinstance(exc, msg):
                raise Exception(f"Expected error: {msg.__name__}, got: {exc!r}")
            return
        error_message: str = str(exc.args[0])
        if isinstance(msg, ZapdeskError):
            if msg.detail not in error_message:
                raise Exception(
                    f"ZapdeskError. Expected error: {msg.detail}, got: {error_message}"
                )
            return
        if msg not in error_message:
            raise Exception(f"Expected error: {msg}, got: {error_message}")
        return
    raise Exception(f"Expected error: {msg}, got no error")


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
