"""Template stamping: fill an existing PDF form and flatten it.

``Stamper`` edits an existing PDF and uses it as a template. It never
generates page geometry; it locates named widgets, writes values into or over
them, flattens the form and serializes the result::

    pdf = Stamper("my_template.pdf")
    pdf.text("first_name", "Jason")
    pdf.text("last_name", "Yates")
    pdf.image("photo", "photo.jpg")
    pdf.checkbox("hungry")
    pdf.save_as("my_output.pdf")

Templates can be authored in any tool that produces AcroForm text fields,
checkboxes and push buttons (used as image targets).
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Any, Mapping

from pdf_stamper.config import StamperSettings
from pdf_stamper.model.field import OFF_STATE, FieldKind, FieldPlacement
from pdf_stamper.model.geometry import Placement, center_in, fit_and_center
from pdf_stamper.pdf.engine import TEXT_FONT_PROPERTY, EngineDocument, FieldEditor, PdfEngine
from pdf_stamper.pdf.importer import UnsupportedFieldKindError
from pdf_stamper.pdf.loader import TemplateSource, load_template
from pdf_stamper.pdf.pymupdf_engine import PyMuPdfEngine
from pdf_stamper.pdf.writer import save_pdf
from pdf_stamper.state.session import DocumentSession

logger = logging.getLogger(__name__)

# Shapes are always drawn over the first page; images and barcodes follow their field.
SHAPE_PAGE = 1
BARCODE_X_SCALE = 1.0


class Stamper:
    def __init__(
        self,
        template: TemplateSource | None = None,
        *,
        engine: PdfEngine | None = None,
        settings: StamperSettings | None = None,
    ) -> None:
        self.settings = settings or StamperSettings()
        self.engine = engine or PyMuPdfEngine(compress=self.settings.compress_output)
        self._session = DocumentSession()
        if template is not None:
            self.template(template)

    def __enter__(self) -> Stamper:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def finalized(self) -> bool:
        return self._session.finalized

    @property
    def _document(self) -> EngineDocument:
        return self._session.require_open()

    @property
    def _form(self) -> FieldEditor:
        return self._document.fields

    def template(self, source: TemplateSource) -> None:
        """Open ``source`` (a path or PDF bytes) as the template of this session."""
        data = load_template(source)
        self._session.attach(self.engine.open(data))
        if self.settings.default_font:
            self.set_font(self.settings.default_font)

    def fields(self) -> list[str]:
        return self._form.names()

    def field_value(self, key: Any) -> str | None:
        return self._form.field_value(str(key))

    def text(self, key: Any, value: Any) -> None:
        """Set the text field ``key`` to ``str(value)``."""
        key = str(key)
        self._form.set_field_value(key, str(value))
        logger.debug("Set text field %r", key)

    def checkbox(self, key: Any) -> None:
        """Check ``key`` by selecting its first appearance state other than Off."""
        key = str(key)
        form = self._form
        kind = form.field_type(key)
        if kind is not FieldKind.CHECKBOX:
            self._kind_mismatch("checkbox", key, kind)
            return

        on_states = [state for state in form.appearance_states(key) if state != OFF_STATE]
        if not on_states:
            logger.debug("Checkbox %r has no checked appearance; leaving it unchanged", key)
            return
        form.set_field_value(key, on_states[0])
        logger.debug("Checked %r with state %r", key, on_states[0])

    def get_checkbox_values(self, key: Any) -> list[str] | None:
        key = str(key)
        form = self._form
        kind = form.field_type(key)
        if kind is not FieldKind.CHECKBOX:
            self._kind_mismatch("get_checkbox_values", key, kind)
            return None
        return form.appearance_states(key)

    def image(self, key: Any, image_path: str | Path) -> Placement:
        """Replace the button field ``key`` with an image scaled to fit and centered."""
        document = self._document
        image = self.engine.decode_image(image_path)
        target = self._first_placement(key)

        placement = fit_and_center(target.rect, image.width, image.height)
        document.content(target.page).draw_image(image, placement)
        logger.debug("Placed image %s on page %d at %s", image_path, target.page, placement)
        return placement

    def barcode(
        self,
        barcode_format: str,
        key: Any,
        value: Any,
        options: Mapping[str, Any] | None = None,
        **extra: Any,
    ) -> Placement:
        """Draw a barcode centered over field ``key``.

        Example::

            pdf.barcode("QR", "2d_barcode", "Barcode data...", bar_level="H", y_scale=0.5)

        ``options`` (and keyword arguments) are checked against the options the
        symbology supports; unknown names raise ``UnsupportedBarcodeOptionError``.
        """
        document = self._document
        generator = self.engine.barcode(barcode_format)
        generator.text = str(value)
        for name, option in {**(options or {}), **extra}.items():
            generator.set_option(name, option)

        target = self._first_placement(key)
        rendered = generator.render()
        placement = center_in(
            target.rect,
            rendered.width * BARCODE_X_SCALE,
            rendered.height * generator.y_scale,
        )
        document.content(target.page).draw_barcode(rendered, placement, generator.y_scale)
        logger.debug("Placed %s barcode on page %d at %s", barcode_format, target.page, placement)
        return placement

    def circle(self, x: float, y: float, r: float) -> None:
        self._document.content(SHAPE_PAGE).circle(x, y, r)

    def ellipse(self, x: float, y: float, width: float, height: float) -> None:
        self._document.content(SHAPE_PAGE).ellipse(x, y, width, height)

    def rectangle(self, x: float, y: float, width: float, height: float) -> None:
        self._document.content(SHAPE_PAGE).rectangle(x, y, width, height)

    def set_font(self, font_name: str) -> None:
        """Use ``font_name`` for every field. Call this *before* setting field values."""
        form = self._form
        for key in form.names():
            form.set_field_property(key, TEXT_FONT_PROPERTY, font_name)
        logger.debug("Set font %r on all fields", font_name)

    def set_metadata(self, key: Any, value: Any) -> None:
        """Set one document info entry, e.g. ``set_metadata("Creator", "me")``."""
        self._document.set_document_info({str(key): str(value)})

    def reset_xmp_metadata(self) -> None:
        """Drop embedded XMP metadata so the output carries the engine default."""
        self._document.set_xmp_metadata(b"")

    def to_bytes(self) -> bytes:
        """Flatten the form and return the finished PDF. Can only be called once."""
        self._document.content(SHAPE_PAGE).stroke()
        data = self._session.finalize()
        logger.debug("Finalized stamped PDF (%d bytes)", len(data))
        return data

    def save_as(self, path: str | Path) -> Path:
        """Finalize and write the PDF to ``path``. Use ``to_bytes`` for an in-memory copy."""
        return save_pdf(self.to_bytes(), path)

    def close(self) -> None:
        """Release the template without producing output."""
        if not self._session.finalized:
            self._session.abandon()

    def _first_placement(self, key: Any) -> FieldPlacement:
        return self._form.positions(str(key))[0]

    def _kind_mismatch(self, operation: str, key: str, kind: FieldKind) -> None:
        message = f"{operation}() needs a checkbox field but {key!r} is {kind.value}"
        if self.settings.strict_field_kinds:
            raise UnsupportedFieldKindError(message)
        logger.warning("Ignoring %s", message)
