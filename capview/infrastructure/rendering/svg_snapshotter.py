from __future__ import annotations

from capview.domain.hierarchy.export import Snapshot, SnapshotRequest, Viewport

from .svg_viewport import SvgViewport


class SvgSnapshotter:
    """Captures an SvgViewport region as an SVG image at request.scale."""

    async def capture(self, viewport: Viewport, request: SnapshotRequest) -> Snapshot:
        if not isinstance(viewport, SvgViewport):
            raise TypeError(f"SvgSnapshotter cannot capture {type(viewport).__name__}")

        svg = viewport.render_svg(
            scale=request.scale,
            background=request.background,
            width=request.width,
            height=request.height,
        )
        return Snapshot(
            data=svg.encode("utf-8"),
            media_type="image/svg+xml",
            width=request.width * request.scale,
            height=request.height * request.scale,
        )
