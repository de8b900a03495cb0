"""Tile placement for the repeating watermark.

Anchors live in a frame centered on the canvas midpoint. The grid sweeps the
square ``[-diagonal, diagonal)`` on both axes, so whatever the rotation the
rotated grid still covers every visible pixel.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Tuple

from .errors import InvalidGeometry

Anchor = Tuple[float, float]
Matrix = Tuple[float, float, float, float]


def _axis(diagonal: float, step: float) -> Tuple[float, ...]:
    count = math.ceil(2 * diagonal / step)
    values = tuple(-diagonal + i * step for i in range(count))
    # guard against float rounding pushing the last value onto the bound
    while values and values[-1] >= diagonal:
        values = values[:-1]
    return values


@dataclass(frozen=True)
class TilePlan:
    canvas_width: int
    canvas_height: int
    step_x: float
    step_y: float
    diagonal: float
    rotation: float = 0.0

    @property
    def xs(self) -> Tuple[float, ...]:
        return _axis(self.diagonal, self.step_x)

    @property
    def ys(self) -> Tuple[float, ...]:
        return _axis(self.diagonal, self.step_y)

    @property
    def columns(self) -> int:
        return len(self.xs)

    @property
    def rows(self) -> int:
        return len(self.ys)

    def anchors(self) -> Iterator[Anchor]:
        """Yield (x, y) row by row: y outer, x inner."""
        xs = self.xs
        for y in self.ys:
            for x in xs:
                yield (x, y)

    def __iter__(self) -> Iterator[Anchor]:
        return self.anchors()

    def __len__(self) -> int:
        return self.rows * self.columns


def plan_tiles(
    canvas_width: int,
    canvas_height: int,
    text_box_width: float,
    font_size: float,
    spacing: float,
    rotation: float = 0.0,
) -> TilePlan:
    """Plan the anchor grid for one render.

    ``rotation`` is recorded on the plan for the renderer; it never moves an
    anchor. Raises InvalidGeometry when a step is not strictly positive.
    """
    step_x = text_box_width + spacing
    step_y = font_size + spacing
    for name, step in (("step_x", step_x), ("step_y", step_y)):
        if not math.isfinite(step) or step <= 0:
            raise InvalidGeometry(
                f"{name} must be positive (text_box_width={text_box_width}, "
                f"font_size={font_size}, spacing={spacing})"
            )
    if canvas_width < 0 or canvas_height < 0:
        raise InvalidGeometry(f"negative canvas size {canvas_width}x{canvas_height}")
    diagonal = math.sqrt(canvas_width * canvas_width + canvas_height * canvas_height)
    return TilePlan(
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        step_x=step_x,
        step_y=step_y,
        diagonal=diagonal,
        rotation=rotation,
    )


def rotation_matrix(degrees: float) -> Matrix:
    """2x2 rotation (a, b, c, d) in screen coordinates; positive is clockwise."""
    rad = degrees * math.pi / 180
    cos, sin = math.cos(rad), math.sin(rad)
    return (cos, -sin, sin, cos)


def to_canvas(anchor: Anchor, center: Tuple[float, float], matrix: Matrix) -> Anchor:
    """Map an anchor from the rotated frame to canvas pixels."""
    a, b, c, d = matrix
    x, y = anchor
    return (center[0] + a * x + b * y, center[1] + c * x + d * y)
