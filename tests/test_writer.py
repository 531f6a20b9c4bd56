"""Tests for template loading and final PDF assembly."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import fitz
import pytest
from pypdf import PdfReader

from pdf_stamper.pdf.loader import PdfLoadError, load_template
from pdf_stamper.pdf.overlay import PageOverlay
from pdf_stamper.pdf.writer import PdfWriteError, save_pdf, write_stamped_pdf


def _blank_pdf(pages: int = 2) -> bytes:
    doc = fitz.open()
    for _ in range(pages):
        doc.new_page()
    data = doc.tobytes()
    doc.close()
    return data


def test_load_template_from_path_and_bytes(template_path: Path, template_bytes: bytes) -> None:
    assert load_template(template_path) == template_bytes
    assert load_template(bytearray(template_bytes)) == template_bytes


def test_load_template_errors(tmp_path: Path) -> None:
    with pytest.raises(PdfLoadError, match="not found"):
        load_template(tmp_path / "missing.pdf")
    with pytest.raises(PdfLoadError, match="Not a PDF"):
        load_template(b"GIF89a")


def test_form_is_stripped(template_bytes: bytes) -> None:
    reader = PdfReader(BytesIO(write_stamped_pdf(template_bytes, {}, {})))

    assert "/AcroForm" not in reader.trailer["/Root"]
    assert all("/Annots" not in page for page in reader.pages)


def test_non_widget_annotations_survive(template_bytes: bytes) -> None:
    doc = fitz.open(stream=template_bytes, filetype="pdf")
    doc[0].add_text_annot((300, 300), "reviewed")
    annotated = doc.tobytes()
    doc.close()

    reader = PdfReader(BytesIO(write_stamped_pdf(annotated, {}, {})))

    subtypes = [annot.get_object()["/Subtype"] for annot in reader.pages[0]["/Annots"]]
    assert "/Text" in subtypes
    assert "/Widget" not in subtypes
    assert "/Annots" not in reader.pages[1]


def test_overlays_are_merged_onto_their_pages() -> None:
    layer = PageOverlay(page=2)
    layer.rectangle(100, 100, 50, 50)
    layer.stroke()

    data = write_stamped_pdf(_blank_pdf(), {2: layer, 1: PageOverlay(page=1)}, {"Creator": "test-suite"})

    doc = fitz.open(stream=data, filetype="pdf")
    try:
        assert doc[0].get_drawings() == []
        assert len(doc[1].get_drawings()) == 1
    finally:
        doc.close()
    assert PdfReader(BytesIO(data)).metadata["/Creator"] == "test-suite"


def test_unstroked_paths_are_not_drawn() -> None:
    layer = PageOverlay(page=1)
    layer.circle(50, 50, 10)

    assert layer.is_empty
    data = write_stamped_pdf(_blank_pdf(1), {1: layer}, {})

    doc = fitz.open(stream=data, filetype="pdf")
    try:
        assert doc[0].get_drawings() == []
    finally:
        doc.close()


def test_xmp_can_be_replaced() -> None:
    data = write_stamped_pdf(_blank_pdf(1), {}, {}, xmp_metadata=b"<x:xmpmeta/>")

    root = PdfReader(BytesIO(data)).trailer["/Root"]
    assert root["/Metadata"].get_object().get_data() == b"<x:xmpmeta/>"


def test_corrupt_input_is_wrapped() -> None:
    with pytest.raises(PdfWriteError):
        write_stamped_pdf(b"%PDF-1.7 broken", {}, {})


def test_save_pdf_wraps_io_errors(tmp_path: Path) -> None:
    with pytest.raises(PdfWriteError):
        save_pdf(b"%PDF", tmp_path / "missing-dir" / "out.pdf")
