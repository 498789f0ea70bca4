# capview/domain/hierarchy/export_geometry.py
#
# Pure geometry for exporting the hierarchy diagram: the bounding box of the
# rendered nodes and the tiling of the captured image over document pages.
#
# Design decisions:
#   - Margins are asymmetric: the right side is wider to leave room for the
#     legend/minimap area that is captured along with the graph.
#   - Node heights come from the rendering surface when it has measured them;
#     otherwise DEFAULT_NODE_HEIGHT is used.
#   - Page sizes are in PDF points. The image is scaled to the printable page
#     width and then cut into vertical strips, one per page, top to bottom.
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum

from .entities import LayoutNode, Size

DEFAULT_NODE_HEIGHT = 250.0
A4_POINTS = (595.28, 841.89)


class Orientation(StrEnum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


@dataclass(frozen=True)
class ExportMargins:
    left: float = 150.0
    right: float = 250.0
    top: float = 100.0
    bottom: float = 120.0


@dataclass(frozen=True)
class ExportBounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    margins: ExportMargins

    @property
    def width(self) -> float:
        return self.max_x - self.min_x + self.margins.left + self.margins.right

    @property
    def height(self) -> float:
        return self.max_y - self.min_y + self.margins.top + self.margins.bottom

    @property
    def offset_x(self) -> float:
        """Translation that moves the left-most node to the left margin."""
        return self.margins.left - self.min_x

    @property
    def offset_y(self) -> float:
        return self.margins.top - self.min_y


def compute_export_bounds(
    nodes: Sequence[LayoutNode],
    measured: Mapping[str, Size] | None = None,
    margins: ExportMargins = ExportMargins(),
    default_height: float = DEFAULT_NODE_HEIGHT,
) -> ExportBounds | None:
    """Axis-aligned box around every node, extended by the margins.

    Returns None when there are no nodes.
    """
    if not nodes:
        return None

    measured = measured or {}
    min_x = min_y = float("inf")
    max_x = max_y = float("-inf")
    for node in nodes:
        size = measured.get(node.id, node.size)
        width = size.width or node.size.width
        height = size.height or node.size.height or default_height
        min_x = min(min_x, node.position.x)
        min_y = min(min_y, node.position.y)
        max_x = max(max_x, node.position.x + width)
        max_y = max(max_y, node.position.y + height)

    return ExportBounds(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y, margins=margins)


def orientation_for(width: float, height: float) -> Orientation:
    return Orientation.LANDSCAPE if width > height else Orientation.PORTRAIT


@dataclass(frozen=True)
class PagePlan:
    """Where the image lands on each page.

    offsets[i] is how far the image is shifted up on page i, so page i shows
    the strip [offsets[i], offsets[i] + printable_height) of the scaled image.
    """

    orientation: Orientation
    page_width: float
    page_height: float
    margin: float
    image_width: float
    image_height: float
    offsets: tuple[float, ...]

    @property
    def page_count(self) -> int:
        return len(self.offsets)

    @property
    def printable_height(self) -> float:
        return self.page_height - 2 * self.margin


def plan_pages(
    pixel_width: float,
    pixel_height: float,
    orientation: Orientation,
    margin: float = 20.0,
    page_size: tuple[float, float] = A4_POINTS,
) -> PagePlan:
    if pixel_width <= 0 or pixel_height <= 0:
        raise ValueError(f"Image size must be positive, got {pixel_width}x{pixel_height}")

    short, long = sorted(page_size)
    page_width, page_height = (long, short) if orientation is Orientation.LANDSCAPE else (short, long)

    image_width = page_width - 2 * margin
    image_height = pixel_height * image_width / pixel_width
    step = page_height - 2 * margin

    offsets: list[float] = []
    top = 0.0
    while top < image_height:
        offsets.append(top)
        top += step

    return PagePlan(
        orientation=orientation,
        page_width=page_width,
        page_height=page_height,
        margin=margin,
        image_width=image_width,
        image_height=image_height,
        offsets=tuple(offsets),
    )
