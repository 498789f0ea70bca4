# tests/domain/test_distribution.py
#
# Tests for the distribution normalizer.
# All tests are pure: no IO, no HTTP, no mocks.
import math

from capview.domain.company.entities import (
    Company,
    CompanyHolder,
    Involvement,
    PersonHolder,
    ShareAmounts,
    ShareClassTotal,
)
from capview.domain.distribution.entities import Slice, SliceCategory
from capview.domain.distribution.services import (
    REMAINING,
    authorized_view,
    available_views,
    classes_view,
    compute_distribution,
    normalize_slices,
    per_class_view,
    total_view,
)


def _person(inv_id: str, name: str, **shares: int) -> Involvement:
    return Involvement(id=inv_id, holder=PersonHolder(name=name), shares=ShareAmounts(**shares))


def _company(*involvements: Involvement, **kwargs: object) -> Company:
    return Company(id="c1", name="Acme", involvements=involvements, **kwargs)  # type: ignore[arg-type]


def test_oversubscribed_class_is_scaled_to_100() -> None:
    """70% + 45% of the Ordinary class: both scaled by 100/115, no remaining slice."""
    company = _company(
        _person("1", "Alice", ordinary=70),
        _person("2", "Bob", ordinary=45),
        share_classes=(ShareClassTotal("Ordinary", 100),),
    )

    view = per_class_view(company, "Ordinary")

    assert [s.name for s in view.slices] == ["Alice", "Bob"]
    assert round(view.slices[0].percentage, 2) == 60.87
    assert round(view.slices[1].percentage, 2) == 39.13
    assert math.isclose(sum(s.percentage for s in view.slices), 100.0, abs_tol=1e-6)
    assert math.isclose(view.total_raw, 115.0)


def test_undersubscribed_class_gets_remaining_slice() -> None:
    """60 of 100 held: a Remaining Shares slice covers the other 40%."""
    company = _company(_person("1", "Alice", ordinary=60), share_classes=(ShareClassTotal("Ordinary", 100),))

    view = per_class_view(company, "Ordinary")

    assert [s.name for s in view.slices] == ["Alice", REMAINING]
    remaining = view.slices[-1]
    assert math.isclose(remaining.percentage, 40.0)
    assert remaining.shares == 40
    assert remaining.category is SliceCategory.REMAINING


def test_remaining_share_count_rounds_half_up() -> None:
    """Remaining 50% of 5 shares is 2.5, rounded to 3."""
    result = normalize_slices([Slice("Alice", 50.0, 2, SliceCategory.PERSON)], current_total=5)

    assert result[-1].name == REMAINING
    assert result[-1].shares == 3


def test_fully_allocated_class_has_no_remaining_slice() -> None:
    result = normalize_slices(
        [Slice("Alice", 40.0, 4, SliceCategory.PERSON), Slice("Bob", 59.99995, 6, SliceCategory.PERSON)],
        current_total=10,
    )

    assert [s.name for s in result] == ["Alice", "Bob"]


def test_invalid_percentages_are_dropped() -> None:
    """NaN, infinite, negative and zero percentages never reach the chart."""
    raw = [
        Slice("nan", float("nan"), 1, SliceCategory.PERSON),
        Slice("inf", float("inf"), 1, SliceCategory.PERSON),
        Slice("neg", -5.0, 1, SliceCategory.PERSON),
        Slice("zero", 0.0, 0, SliceCategory.PERSON),
        Slice("ok", 100.0, 10, SliceCategory.PERSON),
    ]

    result = normalize_slices(raw, current_total=10)

    assert [s.name for s in result] == ["ok"]
    assert all(math.isfinite(s.percentage) and s.percentage >= 0 for s in result)


def test_nothing_valid_gives_empty_result() -> None:
    assert normalize_slices([], current_total=100) == ()
    assert normalize_slices([Slice("x", float("nan"), 0, SliceCategory.PERSON)], current_total=100) == ()


def test_authorized_view_splits_issued_and_remaining() -> None:
    """600 issued of 1000 authorized: 60% issued, 40% remaining."""
    company = _company(authorized_shares=1000, issued_shares=600)

    view = authorized_view(company)

    assert [(s.name, s.shares) for s in view.slices] == [("Issued Shares", 600), (REMAINING, 400)]
    assert math.isclose(view.slices[0].percentage, 60.0)
    assert math.isclose(view.slices[1].percentage, 40.0)
    assert view.total_shares_sum == 600
    assert view.current_class_total == 1000


def test_authorized_view_caps_issued_above_authorized() -> None:
    company = _company(authorized_shares=500, issued_shares=800)

    view = authorized_view(company)

    assert view.slices[0].percentage == 100.0
    assert view.slices[1].percentage == 0.0
    assert view.slices[1].shares == 0


def test_authorized_view_is_empty_without_authorized_capital() -> None:
    assert authorized_view(_company(issued_shares=100)).is_empty


def test_total_view_uses_issued_capital() -> None:
    company = _company(
        _person("1", "Alice", a=100, ordinary=300),
        Involvement(id="2", holder=CompanyHolder(name="Beta Ltd"), shares=ShareAmounts(ordinary=100)),
        issued_shares=1000,
    )

    view = total_view(company)

    assert [s.name for s in view.slices] == ["Alice", "Beta Ltd", REMAINING]
    assert math.isclose(view.slices[0].percentage, 40.0)
    assert math.isclose(view.slices[1].percentage, 10.0)
    assert view.slices[2].shares == 500
    assert view.total_shares_sum == 1000
    assert math.isclose(view.person_total, 40.0)
    assert math.isclose(view.company_total, 10.0)


def test_total_view_falls_back_to_class_totals_without_issued_count() -> None:
    """issued_shares == 0: the sum of the class totals is the denominator."""
    company = _company(
        _person("1", "Alice", a=100, ordinary=200),
        share_classes=(ShareClassTotal("Ordinary", 600), ShareClassTotal("A", 400)),
    )

    view = total_view(company)

    assert [s.name for s in view.slices] == ["Alice", REMAINING]
    assert math.isclose(view.slices[0].percentage, 30.0)
    assert view.slices[1].shares == 700
    assert view.total_shares_sum == 1000
    assert view.current_class_total == 1000


def test_oversubscribed_total_view_is_scaled_to_100() -> None:
    """Holders report 140% of the issued capital: scaled down, no remaining slice."""
    company = _company(
        _person("1", "Alice", ordinary=80),
        _person("2", "Bob", ordinary=60),
        issued_shares=100,
    )

    view = total_view(company)

    assert [s.name for s in view.slices] == ["Alice", "Bob"]
    assert math.isclose(sum(s.percentage for s in view.slices), 100.0, abs_tol=1e-6)
    assert round(view.slices[0].percentage, 2) == 57.14
    assert round(view.slices[1].percentage, 2) == 42.86
    assert math.isclose(view.total_raw, 140.0)
    assert view.total_shares_sum == 100


def test_classes_view_splits_issued_capital_by_class() -> None:
    company = _company(share_classes=(ShareClassTotal("Ordinary", 750), ShareClassTotal("A", 250)))

    view = classes_view(company)

    assert [(s.name, s.percentage) for s in view.slices] == [("Ordinary Shares", 75.0), ("Class A", 25.0)]
    assert view.total_shares_sum == 1000


def test_ordinary_falls_back_to_flat_percentage() -> None:
    """Ordinary class with zero issued: the holder's share_percentage is used."""
    company = _company(
        Involvement(id="1", holder=PersonHolder(name="Alice"), share_percentage=30.0),
        share_classes=(ShareClassTotal("Ordinary", 0),),
    )

    view = per_class_view(company, "Ordinary")

    assert [s.name for s in view.slices] == ["Alice", REMAINING]
    assert view.slices[0].percentage == 30.0
    assert view.slices[1].shares == 0


def test_lettered_class_has_no_flat_percentage_fallback() -> None:
    company = _company(
        Involvement(id="1", holder=PersonHolder(name="Alice"), share_percentage=30.0),
        share_classes=(ShareClassTotal("A", 0),),
    )

    assert per_class_view(company, "A").is_empty
    assert "A" not in compute_distribution(company).view_ids


def test_tabs_follow_fixed_order() -> None:
    company = _company(
        _person("1", "Alice", a=10, ordinary=10),
        authorized_shares=100,
        share_classes=(ShareClassTotal("A", 10), ShareClassTotal("Ordinary", 10)),
    )

    tabs = available_views(company)

    assert [t.id for t in tabs] == ["authorized", "classes", "total", "Ordinary", "A"]
    assert [t.label for t in tabs] == [
        "Authorized Share",
        "Classes",
        "Issued Share",
        "Ordinary Share",
        "Class A Share",
    ]


def test_authorized_tab_hidden_without_authorized_capital() -> None:
    company = _company(_person("1", "Alice", ordinary=10), share_classes=(ShareClassTotal("Ordinary", 10),))

    assert "authorized" not in [t.id for t in available_views(company)]


def test_unnamed_holders_get_placeholder_names() -> None:
    company = _company(
        Involvement(id="1", holder=PersonHolder(name=""), shares=ShareAmounts(ordinary=5)),
        Involvement(id="2", holder=CompanyHolder(name=""), shares=ShareAmounts(ordinary=5)),
        share_classes=(ShareClassTotal("Ordinary", 10),),
    )

    view = per_class_view(company, "Ordinary")

    assert [s.name for s in view.slices] == ["Unnamed", "Unnamed Company"]


def test_compute_distribution_is_memoized_by_value() -> None:
    """Two equal snapshots hit the same cache entry."""
    first = _company(_person("1", "Alice", ordinary=10), share_classes=(ShareClassTotal("Ordinary", 10),))
    second = _company(_person("1", "Alice", ordinary=10), share_classes=(ShareClassTotal("Ordinary", 10),))

    assert compute_distribution(first) is compute_distribution(second)
