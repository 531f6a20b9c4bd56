"""Fill and flatten existing PDF form templates."""

from pdf_stamper.config import StamperSettings
from pdf_stamper.errors import StamperError
from pdf_stamper.model.field import FieldKind, FieldPlacement
from pdf_stamper.model.geometry import Placement, Rect
from pdf_stamper.pdf.barcodes import (
    BarcodeEncodeError,
    UnsupportedBarcodeFormatError,
    UnsupportedBarcodeOptionError,
)
from pdf_stamper.pdf.images import ImageDecodeError
from pdf_stamper.pdf.importer import FieldNotFoundError, PdfImportError, UnsupportedFieldKindError
from pdf_stamper.pdf.loader import PdfLoadError
from pdf_stamper.pdf.pymupdf_engine import PyMuPdfEngine, UnsupportedFontError
from pdf_stamper.pdf.writer import PdfWriteError
from pdf_stamper.stamper import Stamper
from pdf_stamper.state.session import SessionFinalizedError, TemplateNotLoadedError

__version__ = "0.6.0"

__all__ = [
    "BarcodeEncodeError",
    "FieldKind",
    "FieldNotFoundError",
    "FieldPlacement",
    "ImageDecodeError",
    "PdfImportError",
    "PdfLoadError",
    "PdfWriteError",
    "Placement",
    "PyMuPdfEngine",
    "Rect",
    "SessionFinalizedError",
    "Stamper",
    "StamperError",
    "StamperSettings",
    "TemplateNotLoadedError",
    "UnsupportedBarcodeFormatError",
    "UnsupportedBarcodeOptionError",
    "UnsupportedFieldKindError",
    "UnsupportedFontError",
]
