"""Final assembly of a stamped PDF: form removal, overlays, metadata."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Mapping

from pypdf import PdfReader, PdfWriter
from pypdf.generic import ArrayObject, DecodedStreamObject, NameObject

from pdf_stamper.errors import StamperError
from pdf_stamper.pdf.overlay import PageOverlay, build_overlay_pdf

logger = logging.getLogger(__name__)


class PdfWriteError(StamperError):
    """Raised when output generation fails."""


def write_stamped_pdf(
    flattened: bytes,
    layers: Mapping[int, PageOverlay],
    document_info: Mapping[str, str],
    *,
    xmp_metadata: bytes | None = None,
    compress: bool = True,
) -> bytes:
    try:
        reader = PdfReader(BytesIO(flattened))
        writer = PdfWriter(clone_from=reader)

        _drop_form(writer)

        drawn = {page: layer for page, layer in layers.items() if not layer.is_empty}
        if drawn:
            page_sizes = [(float(page.mediabox.width), float(page.mediabox.height)) for page in writer.pages]
            overlay_reader = PdfReader(build_overlay_pdf(page_sizes, drawn))
            for page_number in sorted(drawn):
                writer.pages[page_number - 1].merge_page(overlay_reader.pages[page_number - 1])
            logger.debug("Merged content layers onto pages %s", sorted(drawn))

        if xmp_metadata is not None:
            _replace_xmp(writer, xmp_metadata)

        if document_info:
            writer.add_metadata({_info_key(key): value for key, value in document_info.items()})

        if compress:
            for page in writer.pages:
                page.compress_content_streams()

        output = BytesIO()
        writer.write(output)
    except Exception as exc:
        raise PdfWriteError("Failed to write stamped PDF") from exc

    return output.getvalue()


def save_pdf(data: bytes, output_path: str | Path) -> Path:
    output = Path(output_path)
    try:
        with output.open("wb") as handle:
            handle.write(data)
    except OSError as exc:
        raise PdfWriteError(f"Failed to write output PDF: {output}") from exc
    return output


def _info_key(key: str) -> str:
    key = str(key)
    return key if key.startswith("/") else f"/{key}"


def _drop_form(writer: PdfWriter) -> None:
    """Remove widgets left behind by flattening, then the form catalog entry."""
    for page in writer.pages:
        if "/Annots" not in page:
            continue
        others = ArrayObject(
            ref for ref in page["/Annots"] if ref.get_object().get("/Subtype") != "/Widget"
        )
        if others:
            page[NameObject("/Annots")] = others
        else:
            del page["/Annots"]

    writer._root_object.pop("/AcroForm", None)


def _replace_xmp(writer: PdfWriter, data: bytes) -> None:
    """Swap the catalog's XMP stream; empty ``data`` leaves none at all."""
    if "/Metadata" in writer._root_object:
        del writer._root_object["/Metadata"]
    if not data:
        return

    stream = DecodedStreamObject()
    stream.set_data(data)
    stream[NameObject("/Type")] = NameObject("/Metadata")
    stream[NameObject("/Subtype")] = NameObject("/XML")
    writer._root_object[NameObject("/Metadata")] = writer._add_object(stream)
