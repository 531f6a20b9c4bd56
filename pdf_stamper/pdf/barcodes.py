"""Barcode generators with explicit per-symbology option tables.

Each symbology lists the options it understands. Every option maps to one
reportlab widget attribute (or pdf417gen argument for PDF417) through a
coercing setter, so an unknown name or an unusable value fails before
anything is drawn.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping

import pdf417gen
from reportlab.graphics.barcode import createBarcodeDrawing
from reportlab.graphics.shapes import Drawing
from reportlab.lib.utils import ImageReader

from pdf_stamper.errors import StamperError


class UnsupportedBarcodeFormatError(StamperError):
    """Raised when no generator exists for the requested symbology."""


class UnsupportedBarcodeOptionError(StamperError):
    """Raised when a barcode option is unknown or its value is unusable."""


class BarcodeEncodeError(StamperError):
    """Raised when a value cannot be encoded in the requested symbology."""


def _boolean(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    if isinstance(value, (bool, int)):
        return bool(value)
    raise TypeError(f"not a boolean: {value!r}")


def _positive_float(value: Any) -> float:
    number = float(value)
    if number <= 0:
        raise ValueError(f"must be positive: {value!r}")
    return number


def _non_negative_int(value: Any) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"not an integer: {value!r}")
    number = int(value)
    if number < 0:
        raise ValueError(f"must not be negative: {value!r}")
    return number


def _int_between(low: int, high: int) -> Callable[[Any], int]:
    def coerce(value: Any) -> int:
        number = _non_negative_int(value)
        if not low <= number <= high:
            raise ValueError(f"must be between {low} and {high}: {value!r}")
        return number

    return coerce


def _string(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise TypeError(f"not a non-empty string: {value!r}")
    return value


def _one_of(*choices: str) -> Callable[[Any], str]:
    def coerce(value: Any) -> str:
        text = str(value).upper()
        if text not in choices:
            raise ValueError(f"expected one of {', '.join(choices)}, got {value!r}")
        return text

    return coerce


@dataclass(slots=True, frozen=True)
class BarcodeOption:
    attribute: str
    coerce: Callable[[Any], Any]


@dataclass(slots=True, frozen=True)
class Symbology:
    widget: str
    options: Mapping[str, BarcodeOption]
    encoder: Literal["reportlab", "pdf417"] = "reportlab"


_LINEAR_OPTIONS: dict[str, BarcodeOption] = {
    "bar_width": BarcodeOption("barWidth", _positive_float),
    "bar_height": BarcodeOption("barHeight", _positive_float),
    "human_readable": BarcodeOption("humanReadable", _boolean),
    "quiet": BarcodeOption("quiet", _boolean),
    "font_name": BarcodeOption("fontName", _string),
    "font_size": BarcodeOption("fontSize", _positive_float),
}

_CHECKSUM_OPTIONS: dict[str, BarcodeOption] = {
    **_LINEAR_OPTIONS,
    "checksum": BarcodeOption("checksum", _boolean),
}

_QR_OPTIONS: dict[str, BarcodeOption] = {
    "bar_width": BarcodeOption("barWidth", _positive_float),
    "bar_height": BarcodeOption("barHeight", _positive_float),
    "bar_level": BarcodeOption("barLevel", _one_of("L", "M", "Q", "H")),
    "bar_border": BarcodeOption("barBorder", _non_negative_int),
    "qr_version": BarcodeOption("qrVersion", _non_negative_int),
}

# Drawing size in points; reportlab stretches the symbol to fit.
_SIZED_OPTIONS: dict[str, BarcodeOption] = {
    "width": BarcodeOption("width", _positive_float),
    "height": BarcodeOption("height", _positive_float),
}

# Keys are pdf417gen keyword arguments, except module_width (points per module).
_PDF417_OPTIONS: dict[str, BarcodeOption] = {
    "columns": BarcodeOption("columns", _int_between(1, 30)),
    "security_level": BarcodeOption("security_level", _int_between(0, 8)),
    "ratio": BarcodeOption("ratio", _int_between(1, 10)),
    "padding": BarcodeOption("padding", _non_negative_int),
    "module_width": BarcodeOption("module_width", _positive_float),
}

SYMBOLOGIES: dict[str, Symbology] = {
    "code128": Symbology("Code128", _LINEAR_OPTIONS),
    "standard39": Symbology("Standard39", _CHECKSUM_OPTIONS),
    "extended39": Symbology("Extended39", _CHECKSUM_OPTIONS),
    "standard93": Symbology("Standard93", _LINEAR_OPTIONS),
    "extended93": Symbology("Extended93", _LINEAR_OPTIONS),
    "i2of5": Symbology("I2of5", _CHECKSUM_OPTIONS),
    "codabar": Symbology("Codabar", _CHECKSUM_OPTIONS),
    "ean13": Symbology("EAN13", _LINEAR_OPTIONS),
    "ean8": Symbology("EAN8", _LINEAR_OPTIONS),
    "upca": Symbology("UPCA", _LINEAR_OPTIONS),
    "qr": Symbology("QR", _QR_OPTIONS),
    "datamatrix": Symbology("ECC200DataMatrix", _SIZED_OPTIONS),
    "postnet": Symbology("POSTNET", _SIZED_OPTIONS),
    "pdf417": Symbology("PDF417", _PDF417_OPTIONS, encoder="pdf417"),
}

_ALIASES = {
    "code39": "standard39",
    "code93": "standard93",
    "interleaved2of5": "i2of5",
    "itf": "i2of5",
    "ean": "ean13",
    "upc": "upca",
    "qrcode": "qr",
    "ecc200": "datamatrix",
    "ecc200datamatrix": "datamatrix",
}

Y_SCALE_OPTION = "y_scale"
PDF417_PIXELS_PER_MODULE = 4


def lookup_symbology(barcode_format: str) -> Symbology:
    key = re.sub(r"[\s_\-]", "", str(barcode_format)).lower()
    key = _ALIASES.get(key, key)
    try:
        return SYMBOLOGIES[key]
    except KeyError:
        raise UnsupportedBarcodeFormatError(
            f"Unsupported barcode format: {barcode_format!r}"
        ) from None


@dataclass(slots=True)
class BarcodeImage:
    """A rendered symbol: a vector drawing, or a raster for encoders outside reportlab."""

    width: float
    height: float
    drawing: Drawing | None = None
    raster: ImageReader | None = None


@dataclass(slots=True)
class BarcodeGenerator:
    symbology: Symbology
    text: str = ""
    y_scale: float = 1.0
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def format(self) -> str:
        return self.symbology.widget

    def set_option(self, name: str, value: Any) -> None:
        if name == Y_SCALE_OPTION:
            setter = BarcodeOption("y_scale", _positive_float)
        else:
            setter = self.symbology.options.get(name)
        if setter is None:
            supported = ", ".join(sorted([*self.symbology.options, Y_SCALE_OPTION]))
            raise UnsupportedBarcodeOptionError(
                f"{self.format} does not support option {name!r} (supported: {supported})"
            )

        try:
            coerced = setter.coerce(value)
        except (TypeError, ValueError) as exc:
            raise UnsupportedBarcodeOptionError(
                f"Invalid value for {self.format} option {name!r}: {exc}"
            ) from exc

        if name == Y_SCALE_OPTION:
            self.y_scale = coerced
        else:
            self.attributes[setter.attribute] = coerced

    def render(self) -> BarcodeImage:
        if not self.text:
            raise BarcodeEncodeError(f"Cannot encode an empty {self.format} barcode")

        try:
            if self.symbology.encoder == "pdf417":
                return self._render_pdf417()
            drawing = createBarcodeDrawing(self.format, value=self.text, **self.attributes)
        except Exception as exc:
            raise BarcodeEncodeError(
                f"Failed to encode {self.text!r} as {self.format}"
            ) from exc

        return BarcodeImage(width=float(drawing.width), height=float(drawing.height), drawing=drawing)

    def _render_pdf417(self) -> BarcodeImage:
        options = dict(self.attributes)
        module_width = options.pop("module_width", 1.0)
        codes = pdf417gen.encode(
            self.text,
            columns=options.get("columns", 6),
            security_level=options.get("security_level", 2),
        )
        image = pdf417gen.render_image(
            codes,
            scale=PDF417_PIXELS_PER_MODULE,
            ratio=options.get("ratio", 3),
            padding=options.get("padding", 0),
        )
        points_per_pixel = module_width / PDF417_PIXELS_PER_MODULE
        return BarcodeImage(
            width=image.width * points_per_pixel,
            height=image.height * points_per_pixel,
            raster=ImageReader(image),
        )


def make_barcode_generator(barcode_format: str) -> BarcodeGenerator:
    return BarcodeGenerator(symbology=lookup_symbology(barcode_format))
