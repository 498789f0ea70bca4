# capview/application/services/hierarchy_export.py
#
# Export of the hierarchy diagram to a paginated document.
#
# Design decisions:
#   - The viewport is a shared, non-reentrant resource. The export saves its
#     full state first, then resizes it to the export bounding box and moves
#     the graph to 1:1 scale, captures it, assembles pages and ALWAYS restores
#     the saved state in a finally block. Failures during capture or assembly
#     propagate to the caller after the restore.
#   - A second export on the same exporter while one is in flight raises
#     ExportInProgressError instead of corrupting the saved state.
#   - Missing collaborators or a viewport without nodes abort with None. The
#     restore step still runs for the latter.
#   - There is no cancellation. The worst case is a resized viewport until
#     the in-flight export settles.
from __future__ import annotations

import asyncio

from capview.domain.hierarchy.entities import HierarchyLayout
from capview.domain.hierarchy.export import (
    ExportedDocument,
    PageAssembler,
    SnapshotRequest,
    Snapshotter,
    Viewport,
    ViewportTransform,
)
from capview.domain.hierarchy.export_geometry import (
    ExportMargins,
    compute_export_bounds,
    orientation_for,
    plan_pages,
)
from capview.infrastructure.log import log

SNAPSHOT_BACKGROUND = "#ffffff"
SNAPSHOT_SCALE = 2.0
PAGE_MARGIN = 20.0


class ExportInProgressError(RuntimeError):
    """Another export is still using the viewport."""


class HierarchyExporter:
    def __init__(
        self,
        viewport: Viewport | None,
        snapshotter: Snapshotter | None,
        assembler: PageAssembler | None,
        margins: ExportMargins | None = None,
        settle_seconds: float = 0.0,
    ) -> None:
        self._viewport = viewport
        self._snapshotter = snapshotter
        self._assembler = assembler
        self._margins = margins or ExportMargins()
        self._settle_seconds = settle_seconds
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def export(self, layout: HierarchyLayout) -> ExportedDocument | None:
        viewport, snapshotter, assembler = self._viewport, self._snapshotter, self._assembler
        if viewport is None or snapshotter is None or assembler is None:
            log("hierarchy export skipped: rendering collaborators unavailable")
            return None
        if self._in_flight:
            raise ExportInProgressError("A hierarchy export is already running")

        self._in_flight = True
        saved = viewport.state()
        try:
            viewport.display(layout)
            bounds = compute_export_bounds(viewport.rendered_nodes(), viewport.measured_sizes(), self._margins)
            if bounds is None:
                return None

            viewport.resize(bounds.width, bounds.height, overflow_visible=True)
            viewport.set_transform(ViewportTransform(x=bounds.offset_x, y=bounds.offset_y, zoom=1.0))
            if self._settle_seconds > 0:
                await asyncio.sleep(self._settle_seconds)

            snapshot = await snapshotter.capture(
                viewport,
                SnapshotRequest(
                    background=SNAPSHOT_BACKGROUND,
                    scale=SNAPSHOT_SCALE,
                    width=bounds.width,
                    height=bounds.height,
                ),
            )
            plan = plan_pages(
                snapshot.width,
                snapshot.height,
                orientation_for(bounds.width, bounds.height),
                margin=PAGE_MARGIN,
            )
            content = await assembler.assemble(snapshot, plan, layout.root_name)
            log(
                f"hierarchy export: {len(layout.nodes)} nodes, {plan.page_count} page(s), {plan.orientation}",
                company=layout.root_id,
            )
            return ExportedDocument(
                filename=f"{layout.root_name}-hierarchy.pdf",
                content=content,
                media_type=assembler.media_type,
            )
        finally:
            viewport.restore(saved)
            self._in_flight = False
