"""Import the AcroForm field table of a template into in-memory models."""

from __future__ import annotations

from io import BytesIO
from typing import Any, Iterator

from pypdf import PdfReader
from pypdf.generic import DictionaryObject, StreamObject

from pdf_stamper.errors import StamperError
from pdf_stamper.model.field import FieldKind, FieldPlacement, FormField
from pdf_stamper.model.geometry import Rect

_FLAG_RADIO = 1 << 15
_FLAG_PUSHBUTTON = 1 << 16
_MAX_PARENT_DEPTH = 64


class PdfImportError(StamperError):
    """Raised when existing form fields cannot be imported."""


class FieldNotFoundError(StamperError):
    """Raised when the template has no widget with the requested name."""


class UnsupportedFieldKindError(StamperError):
    """Raised when an operation is applied to a field of the wrong kind."""


class FieldTable:
    """Read-only view of the template's widgets keyed by fully-qualified name."""

    def __init__(self, fields: dict[str, FormField]) -> None:
        self._fields = fields

    def __len__(self) -> int:
        return len(self._fields)

    def names(self) -> list[str]:
        return list(self._fields)

    def get(self, key: str) -> FormField:
        try:
            return self._fields[key]
        except KeyError:
            raise FieldNotFoundError(f"No form field named {key!r}") from None

    def positions(self, key: str) -> list[FieldPlacement]:
        return list(self.get(key).placements)

    def kind(self, key: str) -> FieldKind:
        form_field = self._fields.get(key)
        return form_field.kind if form_field is not None else FieldKind.UNKNOWN

    def appearance_states(self, key: str) -> list[str]:
        return list(self.get(key).appearance_states)


def import_form_fields(template: bytes) -> FieldTable:
    fields: dict[str, FormField] = {}

    try:
        reader = PdfReader(BytesIO(template))
        for page_number, page in enumerate(reader.pages, start=1):
            for annot in _iter_widgets(page):
                name = _qualified_name(annot)
                if not name or "/Rect" not in annot:
                    continue
                rect = annot["/Rect"]

                form_field = fields.get(name)
                if form_field is None:
                    form_field = FormField(name=name, kind=_field_kind(annot))
                    fields[name] = form_field

                form_field.placements.append(
                    FieldPlacement(
                        page=page_number,
                        rect=Rect.normalized(
                            float(rect[0]), float(rect[1]), float(rect[2]), float(rect[3])
                        ),
                    )
                )
                for state in _appearance_states(annot):
                    if state not in form_field.appearance_states:
                        form_field.appearance_states.append(state)
    except Exception as exc:
        raise PdfImportError("Failed to import form fields from template") from exc

    return FieldTable(fields)


def _iter_widgets(page: Any) -> Iterator[DictionaryObject]:
    annots = page.get("/Annots")
    if annots is None:
        return
    for annot_ref in annots.get_object():
        annot = annot_ref.get_object()
        if annot.get("/Subtype") == "/Widget":
            yield annot


def _lineage(annot: DictionaryObject) -> Iterator[DictionaryObject]:
    node: DictionaryObject | None = annot
    depth = 0
    while node is not None and depth < _MAX_PARENT_DEPTH:
        yield node
        parent = node.get("/Parent")
        node = parent.get_object() if parent is not None else None
        depth += 1


def _inherited(annot: DictionaryObject, key: str) -> Any:
    for node in _lineage(annot):
        if key in node:
            return node[key]
    return None


def _qualified_name(annot: DictionaryObject) -> str:
    parts = [str(node["/T"]) for node in _lineage(annot) if node.get("/T") is not None]
    return ".".join(reversed(parts))


def _field_kind(annot: DictionaryObject) -> FieldKind:
    field_type = _inherited(annot, "/FT")
    flags = int(_inherited(annot, "/Ff") or 0)

    if field_type == "/Tx":
        return FieldKind.TEXT
    if field_type == "/Btn":
        if flags & _FLAG_PUSHBUTTON:
            return FieldKind.BUTTON
        if flags & _FLAG_RADIO:
            return FieldKind.RADIO
        return FieldKind.CHECKBOX
    if field_type == "/Ch":
        return FieldKind.CHOICE
    if field_type == "/Sig":
        return FieldKind.SIGNATURE
    return FieldKind.UNKNOWN


def _appearance_states(annot: DictionaryObject) -> list[str]:
    appearance = annot.get("/AP")
    if appearance is None:
        return []

    states: list[str] = []
    appearance = appearance.get_object()
    for variant in ("/N", "/D"):
        entry = appearance.get(variant)
        if entry is None:
            continue
        entry = entry.get_object()
        # A bare stream is a single appearance, not a state dictionary.
        if isinstance(entry, StreamObject) or not isinstance(entry, DictionaryObject):
            continue
        for state in entry.keys():
            name = str(state).lstrip("/")
            if name not in states:
                states.append(name)
    return states
