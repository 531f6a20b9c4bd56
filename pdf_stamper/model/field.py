"""Form field model definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pdf_stamper.model.geometry import Rect

OFF_STATE = "Off"


class FieldKind(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    BUTTON = "button"
    CHOICE = "choice"
    SIGNATURE = "signature"
    UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class FieldPlacement:
    page: int
    rect: Rect


@dataclass(slots=True)
class FormField:
    name: str
    kind: FieldKind
    placements: list[FieldPlacement] = field(default_factory=list)
    appearance_states: list[str] = field(default_factory=list)
