from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class NodeKind(StrEnum):
    ROOT = "root"
    GROUP_HEADER = "group-header"
    SHAREHOLDER = "shareholder"
    REPRESENTATIVE = "representative"


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    """Pixel size. height is None until the rendering surface measures the node."""

    width: float
    height: float | None = None


@dataclass(frozen=True)
class NodePayload:
    """What the renderer prints inside a node. Headers only use title."""

    title: str
    address: str = ""
    nationality: str = ""
    holder_type: str | None = None
    roles: tuple[str, ...] = ()
    percentage: float = 0.0
    shares: tuple[tuple[str, int], ...] = ()


@dataclass(frozen=True)
class LayoutNode:
    id: str
    kind: NodeKind
    payload: NodePayload
    position: Position
    size: Size
    draggable: bool = False
    connectable: bool = False


@dataclass(frozen=True)
class LayoutEdge:
    id: str
    source: str
    target: str


@dataclass(frozen=True)
class HierarchyLayout:
    """Positioned graph plus the canvas size that contains it."""

    nodes: tuple[LayoutNode, ...]
    edges: tuple[LayoutEdge, ...]
    width: float
    height: float
    root_name: str = ""

    @property
    def root_id(self) -> str | None:
        for candidate in self.nodes:
            if candidate.kind is NodeKind.ROOT:
                return candidate.id
        return None

    def node(self, node_id: str) -> LayoutNode | None:
        for candidate in self.nodes:
            if candidate.id == node_id:
                return candidate
        return None
