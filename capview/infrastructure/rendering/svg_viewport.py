# capview/infrastructure/rendering/svg_viewport.py
#
# Server-side rendering surface for the hierarchy diagram.
#
# Design decisions:
#   - The viewport mirrors what a browser graph canvas exposes to the export
#     path: a displayed layout, a pan/zoom transform, a pixel size and an
#     overflow flag. The export service mutates these and restores them.
#   - Node heights are "measured" from the payload (line count times line
#     height), standing in for DOM measurement. Widths come from the layout.
#   - Rendering is a plain SVG string. Text is escaped; nothing else in the
#     payload reaches the markup.
#   - Edges are drawn as orthogonal "smooth step" paths from the bottom
#     center of the parent to the top center of the child.
from __future__ import annotations

import math
from collections.abc import Mapping
from html import escape

from capview.domain.company.value_objects import class_display_name
from capview.domain.hierarchy.entities import HierarchyLayout, LayoutNode, NodeKind, Size
from capview.domain.hierarchy.export import ViewportState, ViewportTransform
from capview.domain.hierarchy.export_geometry import DEFAULT_NODE_HEIGHT

_HEADER_HEIGHT = 56.0
_AVG_CHAR_WIDTH = 7.0
_COMPANY_DOT = "#3b82f6"
_PERSON_DOT = "#10b981"


def _font_scale(node: LayoutNode) -> float:
    return 2.2 if node.kind is NodeKind.ROOT else 1.0


def measure_node(node: LayoutNode) -> Size:
    """Estimated rendered size of a node card."""
    width = node.size.width
    if node.kind is NodeKind.GROUP_HEADER:
        return Size(width=width, height=_HEADER_HEIGHT)

    scale = _font_scale(node)
    payload = node.payload
    chars_per_line = max(1, int(width / (_AVG_CHAR_WIDTH * scale)))
    height = 12.0 + 22.0 * scale
    if payload.address:
        height += 16.0 * scale * math.ceil(len(payload.address) / chars_per_line)
    if payload.nationality:
        height += 16.0 * scale
    if payload.roles:
        height += 34.0
    if payload.percentage > 0:
        height += 32.0 * scale
    if payload.shares:
        height += 18.0 * scale
    height += 24.0
    return Size(width=width, height=height)


class SvgViewport:
    def __init__(self, width: float = 1200.0, height: float = 800.0) -> None:
        self._layout: HierarchyLayout | None = None
        self._transform = ViewportTransform()
        self._width = width
        self._height = height
        self._overflow_visible = False

    @property
    def transform(self) -> ViewportTransform:
        return self._transform

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def overflow_visible(self) -> bool:
        return self._overflow_visible

    def state(self) -> ViewportState:
        return ViewportState(
            transform=self._transform,
            width=self._width,
            height=self._height,
            overflow_visible=self._overflow_visible,
            layout=self._layout,
        )

    def restore(self, state: ViewportState) -> None:
        self._transform = state.transform
        self._width = state.width
        self._height = state.height
        self._overflow_visible = state.overflow_visible
        self._layout = state.layout

    def display(self, layout: HierarchyLayout) -> None:
        self._layout = layout

    def rendered_nodes(self) -> tuple[LayoutNode, ...]:
        return self._layout.nodes if self._layout else ()

    def measured_sizes(self) -> Mapping[str, Size]:
        return {node.id: measure_node(node) for node in self.rendered_nodes()}

    def resize(self, width: float, height: float, overflow_visible: bool) -> None:
        self._width = width
        self._height = height
        self._overflow_visible = overflow_visible

    def set_transform(self, transform: ViewportTransform) -> None:
        self._transform = transform

    def render_svg(
        self,
        scale: float = 1.0,
        background: str = "#ffffff",
        width: float | None = None,
        height: float | None = None,
    ) -> str:
        """The region [0, width] x [0, height] under the current transform as an
        SVG document. Defaults to the viewport size."""
        width = self._width if width is None else width
        height = self._height if height is None else height
        sizes = self.measured_sizes()
        nodes = {node.id: node for node in self.rendered_nodes()}
        parts: list[str] = []

        if self._layout:
            for edge in self._layout.edges:
                source, target = nodes.get(edge.source), nodes.get(edge.target)
                if source is None or target is None:
                    continue
                parts.append(_edge_path(source, target, sizes))
            for node in self._layout.nodes:
                parts.append(_node_group(node, sizes[node.id]))

        t = self._transform
        body = "\n".join(parts)
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{width * scale:.0f}" height="{height * scale:.0f}" '
            f'viewBox="0 0 {width:.2f} {height:.2f}" font-family="Inter, Arial, sans-serif">\n'
            f'<rect x="0" y="0" width="100%" height="100%" fill="{escape(background)}"/>\n'
            f'<g transform="translate({t.x:.2f} {t.y:.2f}) scale({t.zoom:.4f})">\n{body}\n</g>\n'
            "</svg>"
        )


def _node_height(node: LayoutNode, sizes: Mapping[str, Size]) -> float:
    size = sizes.get(node.id)
    return (size.height if size and size.height else None) or DEFAULT_NODE_HEIGHT


def _edge_path(source: LayoutNode, target: LayoutNode, sizes: Mapping[str, Size]) -> str:
    x1 = source.position.x + source.size.width / 2
    y1 = source.position.y + _node_height(source, sizes)
    x2 = target.position.x + target.size.width / 2
    y2 = target.position.y
    mid = (y1 + y2) / 2
    return (
        f'<path d="M {x1:.2f} {y1:.2f} V {mid:.2f} H {x2:.2f} V {y2:.2f}" '
        'fill="none" stroke="#111827" stroke-width="1.2"/>'
    )


def _text(x: float, y: float, content: str, size: float, weight: int = 400, fill: str = "#111827") -> str:
    return (
        f'<text x="{x:.2f}" y="{y:.2f}" font-size="{size:.1f}" font-weight="{weight}" '
        f'fill="{fill}">{escape(content)}</text>'
    )


def _node_group(node: LayoutNode, size: Size) -> str:
    x, y = node.position.x, node.position.y
    width, height = size.width, size.height or DEFAULT_NODE_HEIGHT
    payload = node.payload

    if node.kind is NodeKind.GROUP_HEADER:
        return (
            f'<g data-id="{escape(node.id)}">'
            f'<rect x="{x:.2f}" y="{y:.2f}" width="{width:.2f}" height="{height:.2f}" rx="8" '
            'fill="#f9fafb" stroke="#111827" stroke-width="2"/>'
            f'<text x="{x + width / 2:.2f}" y="{y + height / 2 + 6:.2f}" font-size="18" font-weight="700" '
            f'text-anchor="middle" fill="#111827">{escape(payload.title.upper())}</text></g>'
        )

    scale = _font_scale(node)
    pad = 6.0 * scale
    cursor = y + pad + 16.0 * scale
    lines = [_text(x + pad, cursor, payload.title.upper(), 16.0 * scale, 500, "#1f2937")]
    if payload.address:
        cursor += 16.0 * scale
        lines.append(_text(x + pad, cursor, f"Address: {payload.address}", 11.0 * scale))
    if payload.nationality:
        cursor += 16.0 * scale
        lines.append(_text(x + pad, cursor, f"Nationality: {payload.nationality}", 11.0 * scale))
    if payload.roles:
        cursor += 10.0
        lines.append(
            f'<rect x="{x:.2f}" y="{cursor:.2f}" width="{width:.2f}" height="30" fill="#000000"/>'
        )
        lines.append(_text(x + pad, cursor + 19, " / ".join(payload.roles), 11.0, 500, "#ffffff"))
        cursor += 34.0
    if payload.percentage > 0:
        cursor += 28.0 * scale
        lines.append(_text(x + pad, cursor, f"{payload.percentage:.2f}%", 24.0 * scale, 700, "#1f2937"))
    if payload.shares:
        cursor += 18.0 * scale
        shares = "  ".join(f"{class_display_name(label)}: {amount:,}" for label, amount in payload.shares)
        lines.append(_text(x + pad, cursor, shares, 11.0 * scale))
    cursor += 20.0
    is_company = payload.holder_type == "COMPANY"
    lines.append(
        f'<circle cx="{x + pad + 4:.2f}" cy="{cursor - 4:.2f}" r="4" '
        f'fill="{_COMPANY_DOT if is_company else _PERSON_DOT}"/>'
    )
    lines.append(_text(x + pad + 14, cursor, "Company" if is_company else "Person", 11.0 * scale, 500))

    return (
        f'<g data-id="{escape(node.id)}">'
        f'<rect x="{x:.2f}" y="{y:.2f}" width="{width:.2f}" height="{height:.2f}" rx="8" '
        'fill="#f3f4f6" stroke="#000000" stroke-width="1"/>' + "".join(lines) + "</g>"
    )
