"""Rectangle value type and placement math shared by images and barcodes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Rect:
    x0: float
    y0: float
    x1: float
    y1: float

    @classmethod
    def normalized(cls, x0: float, y0: float, x1: float, y1: float) -> Rect:
        return cls(min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def contains(self, other: Rect, tolerance: float = 1e-6) -> bool:
        return (
            other.x0 >= self.x0 - tolerance
            and other.y0 >= self.y0 - tolerance
            and other.x1 <= self.x1 + tolerance
            and other.y1 <= self.y1 + tolerance
        )


@dataclass(slots=True, frozen=True)
class Placement:
    """Absolute lower-left position and drawn size of a resource."""

    x: float
    y: float
    width: float
    height: float
    scale: float = 1.0

    @property
    def bounds(self) -> Rect:
        return Rect(self.x, self.y, self.x + self.width, self.y + self.height)


def center_in(rect: Rect, width: float, height: float, scale: float = 1.0) -> Placement:
    """Center a ``width`` x ``height`` box inside ``rect`` without resizing it.

    The box may overflow ``rect``; margins on each axis stay equal.
    """
    return Placement(
        x=rect.x0 + (rect.width - width) / 2,
        y=rect.y0 + (rect.height - height) / 2,
        width=width,
        height=height,
        scale=scale,
    )


def fit_and_center(rect: Rect, width: float, height: float) -> Placement:
    """Scale a box uniformly to the largest size fitting ``rect``, then center it."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Cannot place a resource of size {width}x{height}")

    scale = min(rect.width / width, rect.height / height)
    return center_in(rect, width * scale, height * scale, scale=scale)
