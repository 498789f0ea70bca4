from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

_COMPANY_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

ORDINARY = "Ordinary"

# Display order for share classes. Unknown labels sort after these.
CLASS_ORDER: dict[str, int] = {ORDINARY: 0, "A": 1, "B": 2, "C": 3}


class HolderType(StrEnum):
    PERSON = "PERSON"
    COMPANY = "COMPANY"


@dataclass(frozen=True)
class CompanyId:
    """Company id on the remote API. It is interpolated into the request URL,
    so only URL-safe characters are accepted."""

    valor: str

    def __post_init__(self) -> None:
        stripped = self.valor.strip()
        if not _COMPANY_ID_RE.match(stripped):
            raise ValueError(f"Invalid company id: {self.valor!r}")
        object.__setattr__(self, "valor", stripped)

    def __str__(self) -> str:
        return self.valor


def normalize_class_label(raw: str) -> str:
    """CLASS_A -> A, ORDINARY/ordinary -> Ordinary. Other labels pass through trimmed."""
    label = raw.strip()
    if label.upper().startswith("CLASS_"):
        label = label[len("CLASS_"):]
    if label.lower() == ORDINARY.lower():
        return ORDINARY
    return label


def class_sort_key(label: str) -> tuple[int, str]:
    return (CLASS_ORDER.get(label, 99), label)


def class_display_name(label: str) -> str:
    return ORDINARY if label == ORDINARY else f"Class {label}"
