"""
Logo overlay module for compositing logo images onto base images.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Optional

import requests
from PIL import Image

from placement import Placement, Size

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX_RE = re.compile(r"^data:.*?;base64,", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_PNG_MODES = {'1', 'L', 'LA', 'I', 'I;16', 'P', 'RGB', 'RGBA'}


class MissingInputError(ValueError):
    """A required image was given neither inline nor by URL."""


class ImageProcessingError(RuntimeError):
    """An image could not be fetched, decoded or encoded."""


def download_image(url: str, timeout: float = 30) -> bytes:
    """
    Download an image from a URL.

    Args:
        url: The URL of the image to download
        timeout: Seconds to wait for the remote server

    Returns:
        The image data as bytes
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ImageProcessingError(f"Failed to download image from {url}: {e}") from e
    return response.content


def _open_image(raw: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(raw))
        img.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise ImageProcessingError(f"Could not decode image: {e}") from e
    return img


def decode_base64_image(data: str) -> Image.Image:
    """
    Decode a base64 string (optionally a data: URL) into an image.

    Args:
        data: Base64 text, with or without a data URL prefix

    Returns:
        The decoded image, fully loaded
    """
    if not isinstance(data, str):
        raise ImageProcessingError("Image data must be a base64 string")

    data = _DATA_URL_PREFIX_RE.sub("", data.strip())
    data = _WHITESPACE_RE.sub("", data)
    missing_padding = len(data) % 4
    if missing_padding:
        data += "=" * (4 - missing_padding)

    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageProcessingError(f"Invalid base64 image data: {e}") from e

    return _open_image(raw)


@dataclass(frozen=True)
class ImageSource:
    """Where a request says an image comes from: inline base64 or a URL."""

    field: str
    inline: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], field: str, url_alias: Optional[str] = None) -> 'ImageSource':
        """Read '<field>' and '<field>Url' (or url_alias) from a request payload."""
        url = payload.get(f'{field}Url')
        if not url and url_alias:
            url = payload.get(url_alias)
        return cls(field=field, inline=payload.get(field) or None, url=url or None)

    def require(self) -> None:
        if not self.inline and not self.url:
            raise MissingInputError(f"{self.field} is required (base64 data or URL)")


def resolve_image(source: ImageSource, timeout: float = 30) -> Image.Image:
    """
    Load an image from inline base64 data, falling back to a URL.

    Args:
        source: Inline data and/or URL for the image
        timeout: Download timeout for the URL

    Returns:
        The loaded image
    """
    source.require()
    if source.inline:
        return decode_base64_image(source.inline)
    logger.info("Fetching %s from %s", source.field, source.url)
    return _open_image(download_image(source.url, timeout=timeout))


def composite_logo(base_img: Image.Image, logo_img: Image.Image,
                   placement: Optional[Placement], overlay: Size) -> Image.Image:
    """
    Draw the logo onto the base image.

    Args:
        base_img: The base image
        logo_img: The logo image at its native size
        placement: Top-left draw coordinate, or None to skip the overlay
        overlay: Size the logo is drawn at

    Returns:
        A new composited RGBA image, or the base image itself when
        placement is None
    """
    if placement is None:
        return base_img

    canvas = base_img.convert('RGBA')
    width, height = max(1, round(overlay.width)), max(1, round(overlay.height))
    x, y = round(placement.x), round(placement.y)

    # nothing to draw when the logo lands fully off the canvas; paste()
    # can't take coordinates beyond a C long anyway
    if x >= canvas.width or y >= canvas.height or x + width <= 0 or y + height <= 0:
        logger.info("Logo at (%s, %s) is outside the %dx%d canvas, skipping", x, y, canvas.width, canvas.height)
        return canvas

    logo = logo_img.convert('RGBA').resize((width, height), Image.Resampling.LANCZOS)
    # paste() clips anything that falls outside the canvas
    canvas.paste(logo, (x, y), logo)
    return canvas


def encode_png_base64(img: Image.Image) -> str:
    """Encode an image as base64 PNG text."""
    if img.mode not in _PNG_MODES:
        img = img.convert('RGBA')
    output = BytesIO()
    try:
        img.save(output, format='PNG')
    except (OSError, ValueError) as e:
        raise ImageProcessingError(f"Could not encode PNG: {e}") from e
    return base64.b64encode(output.getvalue()).decode('ascii')
