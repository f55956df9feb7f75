"""Unit tests for marks computation."""

from decimal import Decimal

import pytest

from academic_records.api.v1.marks import calculator
from academic_records.core.enums import PerformanceBand
from academic_records.core.exceptions import ValidationError


def test_total_and_percentage() -> None:
    """45 + 40 + 80 = 165 out of 200 -> 82.5%."""
    values = calculator.calculate(45, 40, 80)
    assert values["total_marks"] == Decimal("165")
    assert values["percentage"] == Decimal("82.5")


def test_full_marks_is_hundred_percent() -> None:
    values = calculator.calculate(50, 50, 100)
    assert values["total_marks"] == Decimal("200")
    assert values["percentage"] == Decimal("100")


def test_decimal_components() -> None:
    values = calculator.calculate("12.5", 20.25, Decimal("33.75"))
    assert values["total_marks"] == Decimal("66.50")
    assert values["percentage"] == Decimal("33.25")


def test_percentage_rounds_half_up_to_two_places() -> None:
    # 0.01 / 200 * 100 = 0.005
    assert calculator.compute_percentage(Decimal("0.01")) == Decimal("0.01")


def test_cat1_above_cap_rejected() -> None:
    with pytest.raises(ValidationError) as exc:
        calculator.calculate(51, 40, 80)
    assert exc.value.fields == ["cat1"]
    assert exc.value.status_code == 422


def test_every_offending_field_reported() -> None:
    with pytest.raises(ValidationError) as exc:
        calculator.validate_components(-1, 50.5, 101)
    assert exc.value.fields == ["cat1", "cat2", "fat"]


def test_bounds_are_inclusive() -> None:
    c1, c2, f = calculator.validate_components(0, 50, 100)
    assert (c1, c2, f) == (Decimal("0"), Decimal("50"), Decimal("100"))


def test_components_rounded_before_summing() -> None:
    """Three-decimal inputs are stored at 2 places, so the total is the sum of what is stored."""
    values = calculator.calculate("0.005", 0.005, Decimal("0.005"))
    assert (values["cat1"], values["cat2"], values["fat"]) == (Decimal("0.01"),) * 3
    assert values["total_marks"] == Decimal("0.03")
    assert values["total_marks"] == values["cat1"] + values["cat2"] + values["fat"]


def test_rounding_happens_before_range_check() -> None:
    c1, _, _ = calculator.validate_components("50.004", 0, 0)
    assert c1 == Decimal("50.00")
    with pytest.raises(ValidationError) as exc:
        calculator.validate_components("50.005", 0, 0)
    assert exc.value.fields == ["cat1"]


@pytest.mark.parametrize("bad", ["abc", "", Decimal("NaN"), float("nan"), float("inf"), None])
def test_malformed_component_rejected(bad) -> None:
    with pytest.raises(ValidationError) as exc:
        calculator.calculate(bad, 10, 10)
    assert exc.value.fields == ["cat1"]
    assert exc.value.status_code == 422


def test_every_malformed_field_reported() -> None:
    with pytest.raises(ValidationError) as exc:
        calculator.validate_components("x", 10, "NaN")
    assert exc.value.fields == ["cat1", "fat"]


def test_divisor_ignores_subject_max_marks() -> None:
    """The percentage is always out of 200."""
    assert calculator.compute_percentage(Decimal("100")) == Decimal("50")


@pytest.mark.parametrize(
    "percentage, band",
    [
        (100, PerformanceBand.EXCELLENT),
        (85, PerformanceBand.EXCELLENT),
        (84.99, PerformanceBand.GOOD),
        (70, PerformanceBand.GOOD),
        (50, PerformanceBand.AVERAGE),
        (49.5, PerformanceBand.POOR),
        (0, PerformanceBand.POOR),
    ],
)
def test_performance_band(percentage, band) -> None:
    assert calculator.performance_band(percentage) == band
