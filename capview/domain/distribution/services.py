# capview/domain/distribution/services.py
#
# Distribution normalizer: turns per-holder share counts into 100%-summing
# percentage breakdowns ("views") for the share distribution charts.
#
# Design decisions:
#   - Pure functions over a Company snapshot. No IO, no state. The only cache
#     is lru_cache on compute_distribution, keyed by the (hashable) Company.
#   - Bad numbers never raise: non-finite or non-positive holder percentages
#     are dropped before normalization, and a view with nothing left is
#     returned empty instead of dividing by zero.
#   - Slice order follows involvement order. Sorting is a layout concern and
#     lives in the hierarchy module.
#   - Only the Ordinary class falls back to Involvement.share_percentage when
#     the class total is zero. Classes A/B/C get no fallback.
#
# Invariants:
#   - For any non-empty holder view, sum(slice.percentage) == 100 within 1e-6.
#   - Every slice percentage is finite and >= 0.
#   - At most one REMAINING slice per view, always last.
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import replace
from functools import lru_cache

from capview.domain.company.entities import Company, Involvement, display_name
from capview.domain.company.value_objects import ORDINARY, HolderType, class_display_name, class_sort_key

from .entities import Distribution, DistributionView, Slice, SliceCategory, Tab

REMAINING = "Remaining Shares"
ISSUED = "Issued Shares"
TOLERANCE = 0.0001

AUTHORIZED_VIEW = "authorized"
CLASSES_VIEW = "classes"
TOTAL_VIEW = "total"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _is_valid(percentage: float) -> bool:
    return math.isfinite(percentage) and percentage > 0


def normalize_slices(raw: Iterable[Slice], current_total: int) -> tuple[Slice, ...]:
    """Apply the normalization rule to a list of holder slices.

    Invalid slices (NaN, inf, <= 0) are dropped first. Then:
      - raw sum <= 0: empty result.
      - raw sum > 100: every slice scaled by 100 / raw sum.
      - raw sum < 100 - TOLERANCE: a REMAINING slice covering the gap is
        appended, with its share count derived from current_total.
      - otherwise the slices are returned as they are.
    """
    valid = [s for s in raw if _is_valid(s.percentage)]
    raw_sum = sum(s.percentage for s in valid)
    if raw_sum <= 0:
        return ()

    if raw_sum > 100:
        scale = 100 / raw_sum
        return tuple(replace(s, percentage=s.percentage * scale) for s in valid)

    remaining = 100 - raw_sum
    if remaining > TOLERANCE:
        valid.append(
            Slice(
                name=REMAINING,
                percentage=remaining,
                shares=_round_half_up((remaining / 100) * current_total),
                category=SliceCategory.REMAINING,
            )
        )
    return tuple(valid)


def _category(involvement: Involvement) -> SliceCategory:
    if involvement.holder.type is HolderType.COMPANY:
        return SliceCategory.COMPANY
    return SliceCategory.PERSON


def _holder_view(
    view_id: str,
    label: str,
    raw: Sequence[Slice],
    current_total: int,
    total_shares_sum: int | None = None,
) -> DistributionView:
    valid = [s for s in raw if _is_valid(s.percentage)]
    slices = normalize_slices(valid, current_total)
    if not slices:
        return DistributionView(view_id=view_id, label=label, current_class_total=current_total)

    return DistributionView(
        view_id=view_id,
        label=label,
        slices=slices,
        total_raw=sum(s.percentage for s in valid),
        total_shares_sum=sum(s.shares for s in valid) if total_shares_sum is None else total_shares_sum,
        current_class_total=current_total,
        person_total=sum(s.percentage for s in valid if s.category is SliceCategory.PERSON),
        company_total=sum(s.percentage for s in valid if s.category is SliceCategory.COMPANY),
    )


def available_classes(company: Company) -> list[str]:
    """Distinct class labels of the company, Ordinary first, unknown labels last."""
    seen: dict[str, None] = {}
    for share_class in company.share_classes:
        seen.setdefault(share_class.label, None)
    return sorted(seen, key=class_sort_key)


def per_class_view(company: Company, share_class: str) -> DistributionView:
    """Each holder's stake in one class, relative to that class's issued total."""
    current_total = company.class_total(share_class)
    raw: list[Slice] = []
    for involvement in company.involvements:
        amount = involvement.shares.amount_of(share_class)
        if current_total > 0:
            percentage = amount / current_total * 100
        elif share_class == ORDINARY:
            percentage = involvement.share_percentage
        else:
            percentage = 0.0
        raw.append(Slice(display_name(involvement.holder), percentage, amount, _category(involvement)))
    return _holder_view(share_class, f"{share_class} Shares", raw, current_total)


def issued_total(company: Company) -> int:
    """issued_shares, or the sum of class totals when the company reports none."""
    if company.issued_shares > 0:
        return company.issued_shares
    return sum(max(0, sc.issued) for sc in company.share_classes)


def total_view(company: Company) -> DistributionView:
    """Each holder's cross-class stake relative to the issued capital."""
    current_total = issued_total(company)
    raw: list[Slice] = []
    for involvement in company.involvements:
        held = involvement.shares.total
        if current_total > 0:
            percentage = held / current_total * 100
        else:
            percentage = involvement.share_percentage
        raw.append(Slice(display_name(involvement.holder), percentage, held, _category(involvement)))
    return _holder_view(TOTAL_VIEW, "Issued Shares Breakdown", raw, current_total, total_shares_sum=current_total)


def classes_view(company: Company) -> DistributionView:
    """Split of the issued capital across share classes, independent of holders."""
    total = sum(max(0, sc.issued) for sc in company.share_classes)
    slices: list[Slice] = []
    if total > 0:
        for share_class in company.share_classes:
            percentage = share_class.issued / total * 100
            if not _is_valid(percentage):
                continue
            name = "Ordinary Shares" if share_class.label == ORDINARY else f"Class {share_class.label}"
            slices.append(Slice(name, percentage, share_class.issued, SliceCategory.CLASS))

    return DistributionView(
        view_id=CLASSES_VIEW,
        label="Share Class Distribution",
        slices=tuple(slices),
        total_raw=100.0 if slices else 0.0,
        total_shares_sum=total,
        current_class_total=total,
    )


def authorized_view(company: Company) -> DistributionView:
    """Issued vs not-yet-issued part of the authorized capital. Always two slices
    when authorized_shares > 0; an issued count above the authorized one is
    capped at 100% so the view stays renderable."""
    authorized = company.authorized_shares
    label = "Authorized vs Issued Shares"
    if authorized <= 0:
        return DistributionView(view_id=AUTHORIZED_VIEW, label=label)

    issued = issued_total(company)
    unissued = max(0, authorized - issued)
    slices = (
        Slice(ISSUED, min(100.0, issued / authorized * 100), issued, SliceCategory.STATUS),
        Slice(REMAINING, unissued / authorized * 100, unissued, SliceCategory.STATUS),
    )
    return DistributionView(
        view_id=AUTHORIZED_VIEW,
        label=label,
        slices=slices,
        total_raw=100.0,
        total_shares_sum=issued,
        current_class_total=authorized,
    )


def _tab_label(view_id: str) -> str:
    if view_id == AUTHORIZED_VIEW:
        return "Authorized Share"
    if view_id == CLASSES_VIEW:
        return "Classes"
    if view_id == TOTAL_VIEW:
        return "Issued Share"
    return f"{class_display_name(view_id)} Share"


@lru_cache(maxsize=256)
def compute_distribution(company: Company) -> Distribution:
    """Every view offered for the company, in tab order.

    A per-class view is offered only when its class total is positive, or for
    Ordinary when the flat-percentage fallback produced something to show.
    """
    views: list[DistributionView] = []
    if company.authorized_shares > 0:
        views.append(authorized_view(company))
    views.append(classes_view(company))
    views.append(total_view(company))

    for share_class in available_classes(company):
        view = per_class_view(company, share_class)
        if view.current_class_total > 0 or (share_class == ORDINARY and view.total_raw > 0):
            views.append(view)

    return Distribution(views=tuple(views))


def available_views(company: Company) -> list[Tab]:
    return [Tab(id=view.view_id, label=_tab_label(view.view_id)) for view in compute_distribution(company).views]
