"""Default engine: PyMuPDF for widgets and flattening, pypdf and reportlab for the rest."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Mapping

import fitz

from pdf_stamper.errors import StamperError
from pdf_stamper.model.field import OFF_STATE, FieldKind, FieldPlacement
from pdf_stamper.pdf.barcodes import BarcodeGenerator, make_barcode_generator
from pdf_stamper.pdf.engine import TEXT_FONT_PROPERTY
from pdf_stamper.pdf.images import DecodedImage, decode_image
from pdf_stamper.pdf.importer import FieldTable, import_form_fields
from pdf_stamper.pdf.loader import PdfLoadError
from pdf_stamper.pdf.overlay import PageOverlay
from pdf_stamper.pdf.writer import PdfWriteError, write_stamped_pdf

logger = logging.getLogger(__name__)

_FONT_ALIASES = {
    "helvetica": "Helv",
    "helv": "Helv",
    "helvetica-bold": "HeBo",
    "hebo": "HeBo",
    "courier": "Cour",
    "cour": "Cour",
    "courier-bold": "CoBo",
    "cobo": "CoBo",
    "times-roman": "TiRo",
    "times": "TiRo",
    "tiro": "TiRo",
    "times-bold": "TiBo",
    "tibo": "TiBo",
    "symbol": "Symb",
    "symb": "Symb",
    "zapfdingbats": "ZaDb",
    "zadb": "ZaDb",
}

_TEXT_WIDGETS = {
    fitz.PDF_WIDGET_TYPE_TEXT,
    fitz.PDF_WIDGET_TYPE_COMBOBOX,
    fitz.PDF_WIDGET_TYPE_LISTBOX,
}
_TOGGLE_WIDGETS = {fitz.PDF_WIDGET_TYPE_CHECKBOX, fitz.PDF_WIDGET_TYPE_RADIOBUTTON}


class UnsupportedFontError(StamperError):
    """Raised when a font name is not one of the standard PDF fonts."""


def resolve_font(font_name: str) -> str:
    try:
        return _FONT_ALIASES[str(font_name).strip().lower()]
    except KeyError:
        raise UnsupportedFontError(f"Unsupported font: {font_name!r}") from None


def _on_state(widget: fitz.Widget) -> str | None:
    # PyMuPDF answers True when the widget has no named on-state.
    state = widget.on_state()
    return state if isinstance(state, str) and state != OFF_STATE else None


class PyMuPdfFieldEditor:
    def __init__(self, document: fitz.Document, table: FieldTable) -> None:
        self._document = document
        self._table = table

    def names(self) -> list[str]:
        return self._table.names()

    def positions(self, key: str) -> list[FieldPlacement]:
        return self._table.positions(key)

    def field_type(self, key: str) -> FieldKind:
        return self._table.kind(key)

    def appearance_states(self, key: str) -> list[str]:
        return self._table.appearance_states(key)

    def field_value(self, key: str) -> str | None:
        for widget in self._widgets(key):
            value = widget.field_value
            if widget.field_type in _TOGGLE_WIDGETS and isinstance(value, bool):
                return (_on_state(widget) or OFF_STATE) if value else OFF_STATE
            return None if value is None else str(value)
        return None

    def set_field_value(self, key: str, value: str) -> None:
        for widget in self._widgets(key):
            if widget.field_type in _TOGGLE_WIDGETS:
                on_state = _on_state(widget)
                widget.field_value = value != OFF_STATE and on_state in (None, value)
            else:
                widget.field_value = value
            widget.update()

    def set_field_property(self, key: str, name: str, value: Any) -> None:
        if name != TEXT_FONT_PROPERTY:
            raise ValueError(f"Unsupported field property: {name!r}")

        font = resolve_font(value)
        for widget in self._widgets(key):
            if widget.field_type not in _TEXT_WIDGETS:
                continue
            widget.text_font = font
            widget.update()

    def _widgets(self, key: str) -> Iterator[fitz.Widget]:
        pages = sorted({placement.page for placement in self._table.positions(key)})
        for page_number in pages:
            page = self._document[page_number - 1]
            for widget in page.widgets():
                if widget.field_name == key:
                    yield widget


class PyMuPdfDocument:
    def __init__(self, template: bytes, *, compress: bool = True) -> None:
        try:
            document = fitz.open(stream=template, filetype="pdf")
        except Exception as exc:
            raise PdfLoadError("Failed to open template") from exc

        if document.needs_pass:
            document.close()
            raise PdfLoadError("Encrypted templates are not supported")

        try:
            table = import_form_fields(template)
        except Exception:
            document.close()
            raise

        self._document = document
        self._fields = PyMuPdfFieldEditor(document, table)
        self._compress = compress
        self._layers: dict[int, PageOverlay] = {}
        self._info: dict[str, str] = {}
        self._xmp: bytes | None = None
        logger.debug("Opened template with %d pages and %d fields", document.page_count, len(table))

    @property
    def fields(self) -> PyMuPdfFieldEditor:
        return self._fields

    def content(self, page: int) -> PageOverlay:
        if page < 1 or page > self._document.page_count:
            raise ValueError(f"Page out of range: {page}")
        layer = self._layers.get(page)
        if layer is None:
            layer = self._layers[page] = PageOverlay(page=page)
        return layer

    def set_document_info(self, info: Mapping[str, str]) -> None:
        self._info.update({str(key): str(value) for key, value in info.items()})

    def set_xmp_metadata(self, data: bytes) -> None:
        self._xmp = bytes(data)

    def flatten_and_close(self) -> bytes:
        try:
            self._document.bake(annots=False, widgets=True)
            flattened = self._document.tobytes(
                garbage=3 if self._compress else 0,
                deflate=self._compress,
            )
        except Exception as exc:
            raise PdfWriteError("Failed to flatten form fields") from exc
        finally:
            self.close()

        return write_stamped_pdf(
            flattened,
            self._layers,
            self._info,
            xmp_metadata=self._xmp,
            compress=self._compress,
        )

    def close(self) -> None:
        if not self._document.is_closed:
            self._document.close()


class PyMuPdfEngine:
    def __init__(self, *, compress: bool = True) -> None:
        self.compress = compress

    def open(self, template: bytes) -> PyMuPdfDocument:
        return PyMuPdfDocument(template, compress=self.compress)

    def decode_image(self, path: str | Path) -> DecodedImage:
        return decode_image(path)

    def barcode(self, barcode_format: str) -> BarcodeGenerator:
        return make_barcode_generator(barcode_format)
