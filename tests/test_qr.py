import io

import pytest
from PIL import Image

from zapdesk.core.errors import EncodingFailed
from zapdesk.qr import MAX_PAYLOAD_BYTES, QRRenderer, decode_data_url
from tests.helpers import payment_request


def open_image(data_url: str) -> Image.Image:
    return Image.open(io.BytesIO(decode_data_url(data_url)))


def test_render_data_url():
    data_url = QRRenderer().render(payment_request)
    assert data_url.startswith("data:image/png;base64,")
    img = open_image(data_url)
    assert img.format == "PNG"
    assert img.width >= 256
    assert img.height >= 256


def test_render_short_data_is_scaled_up():
    img = open_image(QRRenderer(min_size_px=300).render("lnbc1short"))
    assert img.width >= 300


@pytest.mark.parametrize(
    "data", [payment_request, payment_request.upper(), "lightning:" + payment_request]
)
def test_render_round_trip(data: str):
    zxingcpp = pytest.importorskip("zxingcpp")
    img = open_image(QRRenderer().render(data)).convert("L")
    results = zxingcpp.read_barcodes(img)
    assert [r.text for r in results] == [data]


def test_render_empty():
    with pytest.raises(EncodingFailed):
        QRRenderer().render("")


@pytest.mark.parametrize("level", ["L", "M", "Q", "H"])
def test_render_exceeds_capacity(level: str):
    renderer = QRRenderer(error_correction=level)
    with pytest.raises(EncodingFailed):
        renderer.render("x" * (MAX_PAYLOAD_BYTES[level] + 1))


def test_render_at_capacity():
    renderer = QRRenderer(error_correction="H")
    assert renderer.render("x" * (MAX_PAYLOAD_BYTES["H"] - 10))


def test_render_ascii():
    text = QRRenderer().render_ascii(payment_request)
    assert len(text.splitlines()) > 20


def test_unknown_error_correction():
    with pytest.raises(ValueError):
        QRRenderer(error_correction="X")
