# tests/domain/test_company_vo.py
import pytest

from capview.domain.company.entities import CompanyHolder, PersonHolder, ShareAmounts, holder_nationality
from capview.domain.company.value_objects import CompanyId, class_display_name, normalize_class_label


def test_company_id_is_stripped() -> None:
    assert CompanyId("  acme-01 ").valor == "acme-01"


@pytest.mark.parametrize("raw", ["", "   ", "a/b", "../etc", "x" * 65, "acme?x=1"])
def test_company_id_rejects_unsafe_values(raw: str) -> None:
    with pytest.raises(ValueError, match="Invalid company id"):
        CompanyId(raw)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("CLASS_A", "A"), ("class_b", "b"), ("ORDINARY", "Ordinary"), (" ordinary ", "Ordinary"), ("C", "C")],
)
def test_normalize_class_label(raw: str, expected: str) -> None:
    assert normalize_class_label(raw) == expected


def test_class_display_name() -> None:
    assert class_display_name("Ordinary") == "Ordinary"
    assert class_display_name("B") == "Class B"


def test_share_amount_items_skip_empty_classes() -> None:
    shares = ShareAmounts(a=5, c=2)

    assert list(shares.items()) == [("A", 5), ("C", 2)]
    assert shares.total == 7
    assert shares.amount_of("B") == 0


def test_only_persons_carry_nationality() -> None:
    assert holder_nationality(PersonHolder(name="Alice", nationality="British")) == "British"
    assert holder_nationality(CompanyHolder(name="Beta Ltd")) == ""
