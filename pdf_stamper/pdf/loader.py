"""Template loading helpers."""

from __future__ import annotations

from pathlib import Path

from pdf_stamper.errors import StamperError

PDF_HEADER = b"%PDF-"

TemplateSource = str | Path | bytes | bytearray


class PdfLoadError(StamperError):
    """Raised when a template PDF cannot be read."""


def load_template(source: TemplateSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        origin = "<bytes>"
    else:
        path = Path(source)
        if not path.exists():
            raise PdfLoadError(f"File not found: {path}")
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise PdfLoadError(f"Failed to read PDF: {path}") from exc
        origin = str(path)

    # Some producers emit leading garbage before the header; readers tolerate 1KB.
    if PDF_HEADER not in data[:1024]:
        raise PdfLoadError(f"Not a PDF document: {origin}")
    return data
