"""Decode SIGNATURE/IMAGE values into embeddable image bytes."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
import logging
from typing import Protocol

import requests

from formfill.coords.precision import Box, normalize

logger = logging.getLogger(__name__)

PNG = "png"
JPEG = "jpeg"

_MEDIA_TYPES = {
    "image/png": PNG,
    "image/jpeg": JPEG,
    "image/jpg": JPEG,
    "image/pjpeg": JPEG,
}
_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_JPEG_SIGNATURE = b"\xff\xd8\xff"


class UnsupportedImageError(ValueError):
    """Raised when an image value is neither a PNG nor a JPEG we can read."""


class ImageFetchError(RuntimeError):
    """Raised when a remote image cannot be downloaded."""


@dataclass(slots=True, frozen=True)
class FetchedBlob:
    content_type: str | None
    content: bytes


@dataclass(slots=True, frozen=True)
class ImagePayload:
    kind: str
    data: bytes


class ImageFetcher(Protocol):
    def fetch(self, url: str) -> FetchedBlob: ...


class HttpImageFetcher:
    """Fetch remote images with a timeout and a download size cap."""

    def __init__(self, timeout: float = 10.0, max_bytes: int = 10 * 1024 * 1024) -> None:
        self._timeout = timeout
        self._max_bytes = max_bytes

    def fetch(self, url: str) -> FetchedBlob:
        try:
            with requests.get(url, timeout=self._timeout, stream=True) as response:
                response.raise_for_status()
                chunks: list[bytes] = []
                received = 0
                for chunk in response.iter_content(chunk_size=65536):
                    received += len(chunk)
                    if received > self._max_bytes:
                        raise ImageFetchError(f"Image exceeds {self._max_bytes} bytes: {url}")
                    chunks.append(chunk)
                content_type = response.headers.get("Content-Type")
        except requests.RequestException as exc:
            raise ImageFetchError(f"Failed to fetch image: {url}") from exc
        return FetchedBlob(content_type=content_type, content=b"".join(chunks))


def kind_from_media_type(media_type: str | None) -> str | None:
    if not media_type:
        return None
    return _MEDIA_TYPES.get(media_type.split(";", 1)[0].strip().lower())


def sniff_kind(data: bytes) -> str | None:
    if data.startswith(_PNG_SIGNATURE):
        return PNG
    if data.startswith(_JPEG_SIGNATURE):
        return JPEG
    return None


def decode_data_url(value: str) -> ImagePayload:
    header, sep, encoded = value.partition(",")
    if not sep or ";base64" not in header.lower():
        raise UnsupportedImageError("Image data URL is not base64 encoded")
    media_type = header[len("data:"):].split(";", 1)[0]
    kind = kind_from_media_type(media_type)
    if kind is None:
        raise UnsupportedImageError(f"Unsupported image media type: {media_type or 'unknown'}")
    try:
        data = base64.b64decode("".join(encoded.split()), validate=False)
    except (binascii.Error, ValueError) as exc:
        raise UnsupportedImageError("Image data URL has invalid base64 payload") from exc
    return ImagePayload(kind=kind, data=data)


def load_image_value(value: object, fetcher: ImageFetcher) -> ImagePayload:
    """Resolve a field value to image bytes.

    Accepts ``data:image/...;base64,`` URLs and absolute http(s) URLs.
    Anything else raises ``UnsupportedImageError``; download problems raise
    ``ImageFetchError``.
    """
    if not isinstance(value, str) or not value.strip():
        raise UnsupportedImageError("Image value must be a non-empty string")
    text = value.strip()
    lowered = text.lower()

    if lowered.startswith("data:"):
        return decode_data_url(text)

    if lowered.startswith(("http://", "https://")):
        blob = fetcher.fetch(text)
        kind = kind_from_media_type(blob.content_type) or sniff_kind(blob.content)
        if kind is None:
            raise UnsupportedImageError(
                f"Unsupported image content type {blob.content_type or 'unknown'} from {text}"
            )
        return ImagePayload(kind=kind, data=blob.content)

    raise UnsupportedImageError("Image value is neither a data URL nor an http(s) URL")


def contain_fit(box: Box, image_width: float, image_height: float) -> Box:
    """Largest aspect-preserving placement of the image centered inside ``box``."""
    scale = min(box.width / image_width, box.height / image_height)
    width = image_width * scale
    height = image_height * scale
    return Box(
        normalize(box.x + (box.width - width) / 2.0),
        normalize(box.y + (box.height - height) / 2.0),
        normalize(width),
        normalize(height),
    )
