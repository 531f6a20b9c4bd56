"""Capability interface of the PDF engine the stamper drives.

The stamper never talks to a PDF library directly. A concrete engine is
injected at construction time; ``PyMuPdfEngine`` is the default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol

from pdf_stamper.model.field import FieldKind, FieldPlacement
from pdf_stamper.model.geometry import Placement
from pdf_stamper.pdf.barcodes import BarcodeGenerator, BarcodeImage
from pdf_stamper.pdf.images import DecodedImage

TEXT_FONT_PROPERTY = "textfont"


class FieldEditor(Protocol):
    """Field-editing handle over the template's AcroForm."""

    def names(self) -> list[str]:
        """Return every field name in document order."""
        ...

    def positions(self, key: str) -> list[FieldPlacement]:
        """Return the placements of ``key``; raise ``FieldNotFoundError`` if absent."""
        ...

    def field_type(self, key: str) -> FieldKind:
        ...

    def field_value(self, key: str) -> str | None:
        ...

    def set_field_value(self, key: str, value: str) -> None:
        ...

    def appearance_states(self, key: str) -> list[str]:
        ...

    def set_field_property(self, key: str, name: str, value: Any) -> None:
        ...


class ContentLayer(Protocol):
    """Drawing surface over a single page."""

    def draw_image(self, image: DecodedImage, placement: Placement) -> None:
        ...

    def draw_barcode(self, barcode: BarcodeImage, placement: Placement, y_scale: float) -> None:
        ...

    def circle(self, x: float, y: float, r: float) -> None:
        ...

    def ellipse(self, x: float, y: float, width: float, height: float) -> None:
        ...

    def rectangle(self, x: float, y: float, width: float, height: float) -> None:
        ...

    def stroke(self) -> None:
        ...


class EngineDocument(Protocol):
    """An opened template: reader, writer and output sink in one handle."""

    @property
    def fields(self) -> FieldEditor:
        ...

    def content(self, page: int) -> ContentLayer:
        ...

    def set_document_info(self, info: Mapping[str, str]) -> None:
        ...

    def set_xmp_metadata(self, data: bytes) -> None:
        """Replace embedded XMP; empty ``data`` restores the engine default."""
        ...

    def flatten_and_close(self) -> bytes:
        """Bake fields into page content, release the document, return output bytes."""
        ...

    def close(self) -> None:
        ...


class PdfEngine(Protocol):
    def open(self, template: bytes) -> EngineDocument:
        ...

    def decode_image(self, path: str | Path) -> DecodedImage:
        ...

    def barcode(self, barcode_format: str) -> BarcodeGenerator:
        ...
