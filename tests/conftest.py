"""Pytest configuration and template fixtures."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import fitz
import pytest
from PIL import Image
from pypdf import PdfReader, PdfWriter
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    NameObject,
    NumberObject,
    TextStringObject,
)
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

PAGE_HEIGHT = letter[1]
PHOTO_RECT = (10.0, 10.0, 110.0, 60.0)
BARCODE_RECT = (100.0, 400.0, 400.0, 500.0)
PORTRAIT_RECT = (300.0, 500.0, 400.0, 700.0)


def _build_form() -> BytesIO:
    buffer = BytesIO()
    report = canvas.Canvas(buffer, pagesize=letter)

    report.acroForm.textfield(
        name="first_name", x=50, y=700, width=200, height=20, value="", borderWidth=0
    )
    report.acroForm.textfield(
        name="last_name", x=50, y=670, width=200, height=20, value="", borderWidth=0
    )
    report.acroForm.checkbox(name="hungry", x=50, y=640, size=14, checked=False)
    report.acroForm.textfield(
        name="barcode",
        x=BARCODE_RECT[0],
        y=BARCODE_RECT[1],
        width=BARCODE_RECT[2] - BARCODE_RECT[0],
        height=BARCODE_RECT[3] - BARCODE_RECT[1],
        value="",
        borderWidth=0,
    )
    report.showPage()

    report.acroForm.textfield(
        name="portrait",
        x=PORTRAIT_RECT[0],
        y=PORTRAIT_RECT[1],
        width=PORTRAIT_RECT[2] - PORTRAIT_RECT[0],
        height=PORTRAIT_RECT[3] - PORTRAIT_RECT[1],
        value="",
        borderWidth=0,
    )
    report.acroForm.textfield(
        name="notes", x=50, y=300, width=400, height=20, value="", borderWidth=0
    )
    report.showPage()

    report.save()
    buffer.seek(0)
    return buffer


def _add_widget(writer: PdfWriter, page_index: int, widget: DictionaryObject) -> None:
    page = writer.pages[page_index]
    widget[NameObject("/Type")] = NameObject("/Annot")
    widget[NameObject("/Subtype")] = NameObject("/Widget")
    widget[NameObject("/F")] = NumberObject(4)
    widget[NameObject("/P")] = page.indirect_reference
    ref = writer._add_object(widget)

    page["/Annots"].append(ref)
    writer._root_object["/AcroForm"]["/Fields"].append(ref)


def _rect(x0: float, y0: float, x1: float, y1: float) -> ArrayObject:
    return ArrayObject([FloatObject(x0), FloatObject(y0), FloatObject(x1), FloatObject(y1)])


def _push_button(name: str, rect: tuple[float, float, float, float]) -> DictionaryObject:
    return DictionaryObject(
        {
            NameObject("/FT"): NameObject("/Btn"),
            NameObject("/Ff"): NumberObject(1 << 16),
            NameObject("/T"): TextStringObject(name),
            NameObject("/Rect"): _rect(*rect),
        }
    )


def _off_only_checkbox(writer: PdfWriter, name: str) -> DictionaryObject:
    off = DecodedStreamObject()
    off.set_data(b"")
    off[NameObject("/Type")] = NameObject("/XObject")
    off[NameObject("/Subtype")] = NameObject("/Form")
    off[NameObject("/BBox")] = _rect(0, 0, 12, 12)

    return DictionaryObject(
        {
            NameObject("/FT"): NameObject("/Btn"),
            NameObject("/T"): TextStringObject(name),
            NameObject("/Rect"): _rect(80, 640, 92, 652),
            NameObject("/V"): NameObject("/Off"),
            NameObject("/AS"): NameObject("/Off"),
            NameObject("/AP"): DictionaryObject(
                {
                    NameObject("/N"): DictionaryObject(
                        {NameObject("/Off"): writer._add_object(off)}
                    )
                }
            ),
        }
    )


def build_template() -> bytes:
    writer = PdfWriter(clone_from=PdfReader(_build_form()))
    _add_widget(writer, 0, _push_button("photo", PHOTO_RECT))
    _add_widget(writer, 0, _off_only_checkbox(writer, "blank"))

    output = BytesIO()
    writer.write(output)
    return output.getvalue()


NESTED_NAME_RECT = (50.0, 560.0, 250.0, 580.0)
REPEATED_RECTS = ((50.0, 520.0, 250.0, 540.0), (50.0, 200.0, 250.0, 220.0))
RADIO_RECTS = {"Small": (300.0, 560.0, 312.0, 572.0), "Large": (330.0, 560.0, 342.0, 572.0)}
HUNGRY_RECT = (50.0, 640.0, 64.0, 654.0)


def _add_kid(writer: PdfWriter, page_index: int, parent_ref, kid: DictionaryObject):
    page = writer.pages[page_index]
    kid[NameObject("/Type")] = NameObject("/Annot")
    kid[NameObject("/Subtype")] = NameObject("/Widget")
    kid[NameObject("/F")] = NumberObject(4)
    kid[NameObject("/P")] = page.indirect_reference
    kid[NameObject("/Parent")] = parent_ref
    ref = writer._add_object(kid)

    page["/Annots"].append(ref)
    parent_ref.get_object()["/Kids"].append(ref)
    return ref


def _add_parent(writer: PdfWriter, name: str, **entries) -> object:
    parent = DictionaryObject({NameObject("/T"): TextStringObject(name), NameObject("/Kids"): ArrayObject()})
    for key, value in entries.items():
        parent[NameObject(f"/{key}")] = value
    ref = writer._add_object(parent)
    writer._root_object["/AcroForm"]["/Fields"].append(ref)
    return ref


def _form_xobject(writer: PdfWriter, content: bytes):
    stream = DecodedStreamObject()
    stream.set_data(content)
    stream[NameObject("/Type")] = NameObject("/XObject")
    stream[NameObject("/Subtype")] = NameObject("/Form")
    stream[NameObject("/BBox")] = _rect(0, 0, 12, 12)
    return writer._add_object(stream)


def build_nested_template() -> bytes:
    """A form with a /Parent hierarchy, a field repeated on two pages and a radio group."""
    writer = PdfWriter(clone_from=PdfReader(_build_form()))
    text_appearance = TextStringObject("/Helv 10 Tf 0 g")

    person = _add_parent(writer, "person")
    _add_kid(
        writer,
        0,
        person,
        DictionaryObject(
            {
                NameObject("/T"): TextStringObject("name"),
                NameObject("/FT"): NameObject("/Tx"),
                NameObject("/DA"): text_appearance,
                NameObject("/Rect"): _rect(*NESTED_NAME_RECT),
            }
        ),
    )

    rep = _add_parent(writer, "rep", FT=NameObject("/Tx"), DA=text_appearance)
    for page_index, rect in enumerate(REPEATED_RECTS):
        _add_kid(writer, page_index, rep, DictionaryObject({NameObject("/Rect"): _rect(*rect)}))

    size = _add_parent(
        writer, "size", FT=NameObject("/Btn"), Ff=NumberObject(1 << 15), V=NameObject("/Off")
    )
    for state, rect in RADIO_RECTS.items():
        _add_kid(
            writer,
            0,
            size,
            DictionaryObject(
                {
                    NameObject("/Rect"): _rect(*rect),
                    NameObject("/AS"): NameObject("/Off"),
                    NameObject("/AP"): DictionaryObject(
                        {
                            NameObject("/N"): DictionaryObject(
                                {
                                    NameObject(f"/{state}"): _form_xobject(writer, b"0 g 2 2 8 8 re f"),
                                    NameObject("/Off"): _form_xobject(writer, b""),
                                }
                            )
                        }
                    ),
                }
            ),
        )

    output = BytesIO()
    writer.write(output)
    return output.getvalue()


def to_user_space(rect: fitz.Rect) -> tuple[float, float, float, float]:
    """Convert a top-left based PyMuPDF rect on a letter page to PDF user space."""
    return (rect.x0, PAGE_HEIGHT - rect.y1, rect.x1, PAGE_HEIGHT - rect.y0)


@pytest.fixture(scope="session")
def template_bytes() -> bytes:
    return build_template()


@pytest.fixture
def template_path(tmp_path: Path, template_bytes: bytes) -> Path:
    path = tmp_path / "template.pdf"
    path.write_bytes(template_bytes)
    return path


@pytest.fixture
def photo_path(tmp_path: Path) -> Path:
    path = tmp_path / "photo.png"
    Image.new("RGB", (100, 100), (200, 30, 30)).save(path)
    return path


@pytest.fixture
def wide_image_path(tmp_path: Path) -> Path:
    path = tmp_path / "wide.jpg"
    Image.new("RGB", (400, 100), (30, 30, 200)).save(path)
    return path


@pytest.fixture(scope="session")
def nested_template_bytes() -> bytes:
    return build_nested_template()
