from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from .entities import HierarchyLayout, LayoutNode, Size
from .export_geometry import PagePlan


@dataclass(frozen=True)
class ViewportTransform:
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


@dataclass(frozen=True)
class ViewportState:
    """Everything the export path may touch on a viewport, captured before it does."""

    transform: ViewportTransform
    width: float
    height: float
    overflow_visible: bool
    layout: HierarchyLayout | None


@dataclass(frozen=True)
class SnapshotRequest:
    background: str
    scale: float
    width: float
    height: float


@dataclass(frozen=True)
class Snapshot:
    """Captured image. width/height are in device pixels (request size * scale)."""

    data: bytes
    media_type: str
    width: float
    height: float


@dataclass(frozen=True)
class ExportedDocument:
    filename: str
    content: bytes
    media_type: str


class Viewport(Protocol):
    """Shared rendering surface. Not reentrant: one export at a time."""

    def state(self) -> ViewportState: ...

    def restore(self, state: ViewportState) -> None: ...

    def display(self, layout: HierarchyLayout) -> None: ...

    def rendered_nodes(self) -> tuple[LayoutNode, ...]: ...

    def measured_sizes(self) -> Mapping[str, Size]: ...

    def resize(self, width: float, height: float, overflow_visible: bool) -> None: ...

    def set_transform(self, transform: ViewportTransform) -> None: ...


class Snapshotter(Protocol):
    async def capture(self, viewport: Viewport, request: SnapshotRequest) -> Snapshot: ...


class PageAssembler(Protocol):
    media_type: str

    async def assemble(self, snapshot: Snapshot, plan: PagePlan, title: str) -> bytes: ...
