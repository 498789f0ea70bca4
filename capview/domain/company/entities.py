# capview/domain/company/entities.py
#
# Read-only snapshot of a company and its involvements.
#
# Design decisions:
#   - Every entity is a frozen dataclass and every collection is a tuple, so a
#     Company is hashable by value. The distribution and hierarchy functions
#     are memoized on the Company itself; two fetches returning the same data
#     hit the same cache entry.
#   - The holder is a tagged variant (PersonHolder | CompanyHolder). Callers
#     go through display_name / holder_address / holder_nationality instead of
#     probing optional fields.
#   - Share amounts are plain non-negative ints. Negative or missing input is
#     clamped to 0 by the infrastructure parser, never here.
#
# Invariants:
#   - ShareAmounts.items() yields only positive amounts, in the order
#     A, B, C, Ordinary.
#   - issued_shares <= authorized_shares is NOT enforced. Consumers must cope
#     with an inconsistent snapshot.
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from .value_objects import ORDINARY, HolderType


@dataclass(frozen=True)
class PersonHolder:
    name: str
    address: str = ""
    nationality: str = ""
    type: HolderType = field(default=HolderType.PERSON, init=False)


@dataclass(frozen=True)
class CompanyHolder:
    name: str
    address: str = ""
    type: HolderType = field(default=HolderType.COMPANY, init=False)


Holder = PersonHolder | CompanyHolder


def display_name(holder: Holder) -> str:
    return holder.name or ("Unnamed Company" if holder.type is HolderType.COMPANY else "Unnamed")


def holder_address(holder: Holder) -> str:
    return holder.address


def holder_nationality(holder: Holder) -> str:
    """Only persons carry a nationality; companies always return ''."""
    if isinstance(holder, PersonHolder):
        return holder.nationality
    return ""


@dataclass(frozen=True)
class ShareAmounts:
    """Per-class share counts held by one involvement."""

    a: int = 0
    b: int = 0
    c: int = 0
    ordinary: int = 0

    @property
    def total(self) -> int:
        return self.a + self.b + self.c + self.ordinary

    def items(self) -> Iterator[tuple[str, int]]:
        for label, amount in (("A", self.a), ("B", self.b), ("C", self.c), (ORDINARY, self.ordinary)):
            if amount > 0:
                yield label, amount

    def amount_of(self, label: str) -> int:
        return dict(self.items()).get(label, 0)


@dataclass(frozen=True)
class Involvement:
    """Relationship between the company and one holder (shareholder and/or officer).

    share_percentage is a caller-supplied flat percentage for holders with a
    known stake but no itemized share counts.
    """

    id: str
    holder: Holder
    shares: ShareAmounts = ShareAmounts()
    roles: tuple[str, ...] = ()
    share_percentage: float = 0.0


def total_shares(involvement: Involvement) -> int:
    return involvement.shares.total


@dataclass(frozen=True)
class ShareClassTotal:
    label: str
    issued: int


@dataclass(frozen=True)
class Company:
    """Aggregate root. Rebuilt in full from every upstream snapshot."""

    id: str
    name: str
    address: str = ""
    authorized_shares: int = 0
    issued_shares: int = 0
    share_classes: tuple[ShareClassTotal, ...] = ()
    involvements: tuple[Involvement, ...] = ()

    def class_total(self, label: str) -> int:
        for share_class in self.share_classes:
            if share_class.label == label:
                return share_class.issued
        return 0
