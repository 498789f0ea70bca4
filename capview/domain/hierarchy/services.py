# capview/domain/hierarchy/services.py
#
# Hierarchy layout engine: company + involvements -> positioned graph.
#
# Design decisions:
#   - The tree is rebuilt from the flat involvement list on every call. There
#     is no mutable tree with parent pointers; build_hierarchy is a pure
#     function memoized on (Company, LayoutConfig), both hashable.
#   - Pixel constants live in LayoutConfig and are passed in, so the placement
#     math can be tested without any rendering surface.
#   - Two groups hang under the root: shareholders (anything holding shares or
#     a positive percentage) and representatives (no shares, but an officer
#     role). Involvements in neither group carry no visual information and are
#     dropped.
#   - Shareholders are ordered by share-class priority (A, B, C, rest) and then
#     by ownership percentage, descending. sorted() is stable, so ties keep
#     involvement order.
#   - Each row of a group is centered on its own width. A short last row is
#     centered under the full rows instead of being left-aligned.
#
# Invariants:
#   - Exactly one edge per parent -> child link: root -> shareholders header,
#     header -> each shareholder, (shareholders header | root) -> representatives
#     header, header -> each representative.
#   - Headers exist only when their group is non-empty. An empty company yields
#     a single root node and no edges.
#   - Every node is non-draggable and non-connectable.
#   - Node ids are unique. Holder nodes live in their own "inv-" namespace, so
#     they never clash with the root or header ids.
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from capview.domain.company.entities import (
    Company,
    Involvement,
    display_name,
    holder_address,
    holder_nationality,
    total_shares,
)

from .entities import HierarchyLayout, LayoutEdge, LayoutNode, NodeKind, NodePayload, Position, Size

SHAREHOLDERS_HEADER = "shareholders-header"
REPRESENTATIVES_HEADER = "representatives-header"

_REPRESENTATIVE_ROLE = re.compile(r"director|secretary|representative", re.IGNORECASE)
_CLASS_PRIORITY = {"A": 0, "B": 1, "C": 2}


@dataclass(frozen=True)
class LayoutConfig:
    """Pixel geometry of the hierarchy diagram."""

    level_gap_y: float = 400.0
    node_width: float = 350.0
    root_width: float = 1400.0
    header_width: float = 400.0
    node_gap: float = 130.0
    nodes_per_row: int = 3
    margin: float = 200.0
    representative_row_ratio: float = 0.9
    canvas_padding: float = 400.0

    def __post_init__(self) -> None:
        if self.nodes_per_row < 1:
            raise ValueError("nodes_per_row must be >= 1")


@dataclass(frozen=True)
class Classification:
    shareholders: tuple[Involvement, ...]
    representatives: tuple[Involvement, ...]


def ownership_percentage(involvement: Involvement, issued_shares: int) -> float:
    """Cross-class stake in % of the issued capital. Without an issued count the
    caller-supplied flat percentage is used."""
    if issued_shares > 0:
        return total_shares(involvement) / issued_shares * 100
    return involvement.share_percentage


def has_shares(involvement: Involvement, issued_shares: int) -> bool:
    # A positive total already covers "any positive per-class amount".
    return total_shares(involvement) > 0 or ownership_percentage(involvement, issued_shares) > 0


def is_representative(involvement: Involvement) -> bool:
    return any(_REPRESENTATIVE_ROLE.search(role) for role in involvement.roles)


def classify(company: Company) -> Classification:
    shareholders: list[Involvement] = []
    representatives: list[Involvement] = []
    for involvement in company.involvements:
        if has_shares(involvement, company.issued_shares):
            shareholders.append(involvement)
        elif is_representative(involvement):
            representatives.append(involvement)
    return Classification(tuple(shareholders), tuple(representatives))


def share_class_priority(involvement: Involvement) -> int:
    """0 for any class A holding, 1 for B, 2 for C, 3 for Ordinary-only or none."""
    priorities = [_CLASS_PRIORITY[label] for label, _ in involvement.shares.items() if label in _CLASS_PRIORITY]
    return min(priorities, default=3)


def sort_shareholders(shareholders: tuple[Involvement, ...], issued_shares: int) -> list[Involvement]:
    return sorted(
        shareholders,
        key=lambda inv: (share_class_priority(inv), -ownership_percentage(inv, issued_shares)),
    )


def layout_width(largest_group: int, config: LayoutConfig) -> float:
    """totalWidth = n * node_width + (n - 1) * gap + margin, with n >= 1."""
    count = max(largest_group, 1)
    return count * config.node_width + (count - 1) * config.node_gap + config.margin


def grid_positions(
    count: int,
    total_width: float,
    top: float,
    row_gap: float,
    config: LayoutConfig,
) -> list[Position]:
    """Row-wrapping grid. Item i goes to row i // per_row, column i % per_row;
    each row is centered horizontally within total_width using its own width."""
    per_row = config.nodes_per_row
    positions: list[Position] = []
    for index in range(count):
        row, col = divmod(index, per_row)
        in_row = min(per_row, count - row * per_row)
        row_width = in_row * config.node_width + (in_row - 1) * config.node_gap
        x = (total_width - row_width) / 2 + col * (config.node_width + config.node_gap)
        positions.append(Position(x=x, y=top + row * row_gap))
    return positions


def _display_roles(involvement: Involvement, is_shareholder: bool) -> tuple[str, ...]:
    roles = list(involvement.roles)
    if is_shareholder and not any(role.lower() == "shareholder" for role in roles):
        roles.insert(0, "Shareholder")
    return tuple(roles)


def _holder_payload(involvement: Involvement, issued_shares: int, is_shareholder: bool) -> NodePayload:
    return NodePayload(
        title=display_name(involvement.holder),
        address=holder_address(involvement.holder),
        nationality=holder_nationality(involvement.holder),
        holder_type=involvement.holder.type.value,
        roles=_display_roles(involvement, is_shareholder),
        percentage=ownership_percentage(involvement, issued_shares),
        shares=tuple(involvement.shares.items()),
    )


def _root_payload(company: Company) -> NodePayload:
    return NodePayload(
        title=company.name,
        address=company.address,
        holder_type="COMPANY",
        shares=tuple((sc.label, sc.issued) for sc in company.share_classes),
    )


def _header(node_id: str, title: str, y: float, total_width: float, config: LayoutConfig) -> LayoutNode:
    return LayoutNode(
        id=node_id,
        kind=NodeKind.GROUP_HEADER,
        payload=NodePayload(title=title),
        position=Position(x=(total_width - config.header_width) / 2, y=y),
        size=Size(width=config.header_width),
    )


def _edge(source: str, target: str) -> LayoutEdge:
    return LayoutEdge(id=f"{source}-{target}", source=source, target=target)


def _leaf_id(involvement: Involvement, position: int, taken: set[str]) -> str:
    """inv-<upstream id>, or inv-<position> when upstream sent none; suffixed until unique."""
    base = f"inv-{involvement.id}" if involvement.id else f"inv-{position}"
    node_id, suffix = base, 1
    while node_id in taken:
        suffix += 1
        node_id = f"{base}-{suffix}"
    taken.add(node_id)
    return node_id


@lru_cache(maxsize=256)
def build_hierarchy(company: Company, config: LayoutConfig = LayoutConfig()) -> HierarchyLayout:
    classification = classify(company)
    shareholders = sort_shareholders(classification.shareholders, company.issued_shares)
    representatives = list(classification.representatives)

    gap = config.level_gap_y
    per_row = config.nodes_per_row
    total_width = layout_width(max(len(shareholders), len(representatives)), config)

    root_id = str(company.id)
    taken = {root_id, SHAREHOLDERS_HEADER, REPRESENTATIVES_HEADER}
    nodes: list[LayoutNode] = [
        LayoutNode(
            id=root_id,
            kind=NodeKind.ROOT,
            payload=_root_payload(company),
            position=Position(x=(total_width - config.root_width) / 2, y=0.0),
            size=Size(width=config.root_width),
        )
    ]
    edges: list[LayoutEdge] = []

    if shareholders:
        nodes.append(_header(SHAREHOLDERS_HEADER, "Shareholders/representatives", gap, total_width, config))
        edges.append(_edge(root_id, SHAREHOLDERS_HEADER))
        positions = grid_positions(len(shareholders), total_width, gap * 2, gap, config)
        for index, (involvement, position) in enumerate(zip(shareholders, positions, strict=True)):
            node_id = _leaf_id(involvement, index, taken)
            nodes.append(
                LayoutNode(
                    id=node_id,
                    kind=NodeKind.SHAREHOLDER,
                    payload=_holder_payload(involvement, company.issued_shares, is_shareholder=True),
                    position=position,
                    size=Size(width=config.node_width),
                )
            )
            edges.append(_edge(SHAREHOLDERS_HEADER, node_id))
        last_shareholder_y = gap * 2 + ((len(shareholders) - 1) // per_row) * gap
    else:
        last_shareholder_y = gap

    bottom_y = last_shareholder_y
    if representatives:
        header_y = last_shareholder_y + gap
        nodes.append(_header(REPRESENTATIVES_HEADER, "Representatives", header_y, total_width, config))
        edges.append(_edge(SHAREHOLDERS_HEADER if shareholders else root_id, REPRESENTATIVES_HEADER))
        positions = grid_positions(
            len(representatives),
            total_width,
            header_y + gap,
            gap * config.representative_row_ratio,
            config,
        )
        for index, (involvement, position) in enumerate(zip(representatives, positions, strict=True)):
            node_id = _leaf_id(involvement, len(shareholders) + index, taken)
            nodes.append(
                LayoutNode(
                    id=node_id,
                    kind=NodeKind.REPRESENTATIVE,
                    payload=_holder_payload(involvement, company.issued_shares, is_shareholder=False),
                    position=position,
                    size=Size(width=config.node_width),
                )
            )
            edges.append(_edge(REPRESENTATIVES_HEADER, node_id))
        bottom_y = header_y + gap + ((len(representatives) - 1) // per_row) * gap

    return HierarchyLayout(
        nodes=tuple(nodes),
        edges=tuple(edges),
        width=total_width + config.canvas_padding,
        height=bottom_y + 2 * config.canvas_padding,
        root_name=company.name,
    )
