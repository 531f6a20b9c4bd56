"""Image decoding for field placement."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from reportlab.lib.utils import ImageReader

from pdf_stamper.errors import StamperError


class ImageDecodeError(StamperError):
    """Raised when an image file cannot be decoded."""


@dataclass(slots=True)
class DecodedImage:
    reader: ImageReader
    width: float
    height: float


def decode_image(path: str | Path) -> DecodedImage:
    source = Path(path)
    if not source.exists():
        raise ImageDecodeError(f"Image not found: {source}")

    try:
        reader = ImageReader(str(source))
        width, height = reader.getSize()
    except Exception as exc:
        raise ImageDecodeError(f"Failed to decode image: {source}") from exc

    if width <= 0 or height <= 0:
        raise ImageDecodeError(f"Image has no pixels: {source}")
    return DecodedImage(reader=reader, width=float(width), height=float(height))
