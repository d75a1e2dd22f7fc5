import base64

import pytest
import requests

import overlay_logo
from conftest import FakeResponse, from_base64, make_image, to_base64
from overlay_logo import (
    ImageProcessingError,
    ImageSource,
    MissingInputError,
    composite_logo,
    decode_base64_image,
    download_image,
    encode_png_base64,
    resolve_image,
)
from placement import Placement, Size


def test_decode_plain_base64(base_image):
    img = decode_base64_image(to_base64(base_image))
    assert img.size == (200, 100)


def test_decode_data_url_with_whitespace_and_missing_padding(base_image):
    data = to_base64(base_image).rstrip('=')
    wrapped = "data:image/png;base64," + "\n".join(data[i:i + 60] for i in range(0, len(data), 60))
    img = decode_base64_image(wrapped)
    assert img.size == (200, 100)


def test_decode_rejects_invalid_base64():
    with pytest.raises(ImageProcessingError):
        decode_base64_image("***not base64***")


def test_decode_rejects_non_image_bytes():
    with pytest.raises(ImageProcessingError):
        decode_base64_image(base64.b64encode(b"plain text, not an image").decode())


def test_decode_rejects_non_string():
    with pytest.raises(ImageProcessingError):
        decode_base64_image(12345)


def test_download_image_returns_content(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(b"png-bytes")

    monkeypatch.setattr(overlay_logo.requests, "get", fake_get)
    assert download_image("https://example.com/logo.png", timeout=5) == b"png-bytes"
    assert calls == [("https://example.com/logo.png", 5)]


def test_download_image_wraps_http_errors(monkeypatch):
    monkeypatch.setattr(overlay_logo.requests, "get", lambda url, timeout: FakeResponse(status_code=404))
    with pytest.raises(ImageProcessingError, match="404"):
        download_image("https://example.com/missing.png")


def test_download_image_wraps_connection_errors(monkeypatch):
    def fake_get(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(overlay_logo.requests, "get", fake_get)
    with pytest.raises(ImageProcessingError, match="connection refused"):
        download_image("https://example.com/logo.png")


def test_image_source_from_payload():
    source = ImageSource.from_payload({'logoImageUrl': 'https://x/l.png'}, 'logoImage')
    assert source == ImageSource(field='logoImage', inline=None, url='https://x/l.png')

    aliased = ImageSource.from_payload({'base_image_url': 'https://x/b.png'}, 'baseImage', 'base_image_url')
    assert aliased.url == 'https://x/b.png'


def test_image_source_require_raises_when_empty():
    with pytest.raises(MissingInputError, match="logoImage"):
        ImageSource.from_payload({'logoImage': ''}, 'logoImage').require()


def test_resolve_image_prefers_inline(monkeypatch, base_image):
    def fail_get(*args, **kwargs):
        raise AssertionError("should not download")

    monkeypatch.setattr(overlay_logo.requests, "get", fail_get)
    source = ImageSource(field='baseImage', inline=to_base64(base_image), url='https://example.com/b.png')
    assert resolve_image(source).size == (200, 100)


def test_resolve_image_downloads_url(monkeypatch, logo_image):
    raw = base64.b64decode(to_base64(logo_image))
    monkeypatch.setattr(overlay_logo.requests, "get", lambda url, timeout: FakeResponse(raw))
    img = resolve_image(ImageSource(field='logoImage', url='https://example.com/l.png'))
    assert img.size == (40, 20)


def test_composite_draws_logo_at_placement(base_image, logo_image):
    result = composite_logo(base_image, logo_image, Placement(10, 20), Size(20, 10))
    assert result.mode == 'RGBA'
    assert result.getpixel((15, 25)) == (255, 0, 0, 255)
    assert result.getpixel((5, 5)) == (0, 0, 255, 255)
    # original is left untouched
    assert base_image.getpixel((15, 25)) == (0, 0, 255)


def test_composite_rounds_fractional_coordinates(base_image, logo_image):
    result = composite_logo(base_image, logo_image, Placement(9.6, 19.4), Size(20, 10))
    assert result.getpixel((10, 19)) == (255, 0, 0, 255)
    assert result.getpixel((9, 19)) == (0, 0, 255, 255)


def test_composite_clips_partially_outside(base_image, logo_image):
    result = composite_logo(base_image, logo_image, Placement(-10, -5), Size(20, 10))
    assert result.size == (200, 100)
    assert result.getpixel((0, 0)) == (255, 0, 0, 255)
    assert result.getpixel((10, 5)) == (0, 0, 255, 255)


def test_composite_respects_logo_transparency(base_image):
    clear_logo = make_image((40, 20), (255, 0, 0, 0), mode='RGBA')
    result = composite_logo(base_image, clear_logo, Placement(0, 0), Size(40, 20))
    assert result.getpixel((5, 5)) == (0, 0, 255, 255)


def test_composite_without_placement_returns_base(base_image, logo_image):
    assert composite_logo(base_image, logo_image, None, Size(20, 10)) is base_image


def test_composite_tiny_overlay_is_at_least_one_pixel(base_image, logo_image):
    result = composite_logo(base_image, logo_image, Placement(0, 0), Size(0.2, 0.1))
    assert result.getpixel((0, 0)) == (255, 0, 0, 255)


def test_encode_png_base64(base_image):
    img = from_base64(encode_png_base64(base_image))
    assert img.format == 'PNG'
    assert img.tobytes() == base_image.tobytes()


def test_encode_converts_modes_png_cannot_store():
    cmyk = make_image((4, 4), (0, 0, 0, 0), mode='CMYK')
    img = from_base64(encode_png_base64(cmyk))
    assert img.format == 'PNG'
    assert img.mode == 'RGBA'


@pytest.mark.parametrize("placement", [
    Placement(-1e20, -1e20),
    Placement(1e20, 1e20),
    Placement(200, 0),
    Placement(0, -10),
])
def test_composite_skips_logo_fully_off_canvas(base_image, logo_image, placement):
    result = composite_logo(base_image, logo_image, placement, Size(20, 10))
    assert result.mode == 'RGBA'
    assert result.convert('RGB').tobytes() == base_image.tobytes()
