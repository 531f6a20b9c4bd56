"""Per-page content layers rendered into a reportlab overlay document."""

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import Literal, Union

from reportlab.graphics import renderPDF
from reportlab.pdfgen import canvas

from pdf_stamper.model.geometry import Placement
from pdf_stamper.pdf.barcodes import BarcodeImage
from pdf_stamper.pdf.images import DecodedImage

ShapeKind = Literal["circle", "ellipse", "rectangle"]


@dataclass(slots=True, frozen=True)
class PathSegment:
    kind: ShapeKind
    args: tuple[float, ...]


@dataclass(slots=True, frozen=True)
class ImageOp:
    image: DecodedImage
    placement: Placement


@dataclass(slots=True, frozen=True)
class BarcodeOp:
    barcode: BarcodeImage
    placement: Placement
    y_scale: float


@dataclass(slots=True, frozen=True)
class StrokeOp:
    segments: tuple[PathSegment, ...]


Operation = Union[ImageOp, BarcodeOp, StrokeOp]


@dataclass(slots=True)
class PageOverlay:
    """Drawing surface placed over one page of the template."""

    page: int
    operations: list[Operation] = field(default_factory=list)
    pending: list[PathSegment] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.operations

    def draw_image(self, image: DecodedImage, placement: Placement) -> None:
        self.operations.append(ImageOp(image=image, placement=placement))

    def draw_barcode(self, barcode: BarcodeImage, placement: Placement, y_scale: float) -> None:
        self.operations.append(BarcodeOp(barcode=barcode, placement=placement, y_scale=y_scale))

    def circle(self, x: float, y: float, r: float) -> None:
        self.pending.append(PathSegment("circle", (float(x), float(y), float(r))))

    def ellipse(self, x: float, y: float, width: float, height: float) -> None:
        self.pending.append(PathSegment("ellipse", (float(x), float(y), float(width), float(height))))

    def rectangle(self, x: float, y: float, width: float, height: float) -> None:
        self.pending.append(PathSegment("rectangle", (float(x), float(y), float(width), float(height))))

    def stroke(self) -> None:
        if self.pending:
            self.operations.append(StrokeOp(segments=tuple(self.pending)))
            self.pending.clear()


def build_overlay_pdf(
    page_sizes: list[tuple[float, float]],
    layers: dict[int, PageOverlay],
) -> BytesIO:
    buffer = BytesIO()

    base_w, base_h = page_sizes[0]
    report = canvas.Canvas(buffer, pagesize=(base_w, base_h), pageCompression=1)

    for page_number, (width, height) in enumerate(page_sizes, start=1):
        report.setPageSize((width, height))
        layer = layers.get(page_number)
        if layer is not None:
            for operation in layer.operations:
                _render_operation(report, operation)
        report.showPage()

    report.save()
    buffer.seek(0)
    return buffer


def _render_operation(report: canvas.Canvas, operation: Operation) -> None:
    if isinstance(operation, ImageOp):
        placement = operation.placement
        report.drawImage(
            operation.image.reader,
            placement.x,
            placement.y,
            width=placement.width,
            height=placement.height,
            mask="auto",
        )
    elif isinstance(operation, BarcodeOp) and operation.barcode.raster is not None:
        placement = operation.placement
        report.drawImage(
            operation.barcode.raster,
            placement.x,
            placement.y,
            width=placement.width,
            height=placement.height,
        )
    elif isinstance(operation, BarcodeOp):
        placement = operation.placement
        report.saveState()
        report.translate(placement.x, placement.y)
        report.scale(1.0, operation.y_scale)
        renderPDF.draw(operation.barcode.drawing, report, 0, 0)
        report.restoreState()
    else:
        path = report.beginPath()
        for segment in operation.segments:
            if segment.kind == "circle":
                path.circle(*segment.args)
            elif segment.kind == "ellipse":
                path.ellipse(*segment.args)
            else:
                path.rect(*segment.args)
        report.drawPath(path, stroke=1, fill=0)
