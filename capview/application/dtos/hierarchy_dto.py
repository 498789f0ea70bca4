from __future__ import annotations

from pydantic import BaseModel

from capview.domain.hierarchy.entities import HierarchyLayout, LayoutNode


class PositionDTO(BaseModel):
    x: float
    y: float


class SizeDTO(BaseModel):
    width: float
    height: float | None = None


class ShareLineDTO(BaseModel):
    share_class: str
    amount: int


class NodeDataDTO(BaseModel):
    title: str
    address: str = ""
    nationality: str = ""
    holder_type: str | None = None   # "PERSON" | "COMPANY" | None for headers
    roles: list[str] = []
    percentage: float = 0.0
    shares: list[ShareLineDTO] = []


class NodeDTO(BaseModel):
    id: str
    kind: str            # "root" | "group-header" | "shareholder" | "representative"
    data: NodeDataDTO
    position: PositionDTO
    size: SizeDTO
    draggable: bool = False
    connectable: bool = False

    @classmethod
    def from_domain(cls, node: LayoutNode) -> NodeDTO:
        payload = node.payload
        return cls(
            id=node.id,
            kind=node.kind.value,
            data=NodeDataDTO(
                title=payload.title,
                address=payload.address,
                nationality=payload.nationality,
                holder_type=payload.holder_type,
                roles=list(payload.roles),
                percentage=payload.percentage,
                shares=[ShareLineDTO(share_class=label, amount=amount) for label, amount in payload.shares],
            ),
            position=PositionDTO(x=node.position.x, y=node.position.y),
            size=SizeDTO(width=node.size.width, height=node.size.height),
            draggable=node.draggable,
            connectable=node.connectable,
        )


class EdgeDTO(BaseModel):
    id: str
    source: str
    target: str


class HierarchyDTO(BaseModel):
    company_id: str
    nodes: list[NodeDTO]
    edges: list[EdgeDTO]
    width: float
    height: float

    @classmethod
    def from_domain(cls, company_id: str, layout: HierarchyLayout) -> HierarchyDTO:
        return cls(
            company_id=company_id,
            nodes=[NodeDTO.from_domain(n) for n in layout.nodes],
            edges=[EdgeDTO(id=e.id, source=e.source, target=e.target) for e in layout.edges],
            width=layout.width,
            height=layout.height,
        )
