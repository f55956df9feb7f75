"""
Marks computation.

Component caps: CAT1 <= 50, CAT2 <= 50, FAT <= 100 (all >= 0).
total = cat1 + cat2 + fat; percentage = total / 200 * 100.

The divisor is the fixed 200 even when a subject's max_marks differs.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Optional, Tuple, Union

from academic_records.core.enums import PerformanceBand
from academic_records.core.exceptions import ValidationError

CAT1_MAX = Decimal("50")
CAT2_MAX = Decimal("50")
FAT_MAX = Decimal("100")
TOTAL_DIVISOR = Decimal("200")

COMPONENT_LIMITS: Dict[str, Decimal] = {
    "cat1": CAT1_MAX,
    "cat2": CAT2_MAX,
    "fat": FAT_MAX,
}

_TWO_PLACES = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 82.1 do not carry binary noise
    return Decimal(str(value))


def _component(value: Number) -> Optional[Decimal]:
    """The component rounded to the stored 2 places, or None when it is not a finite number."""
    try:
        number = to_decimal(value)
        if not number.is_finite():
            return None
        return number.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        return None


def validate_components(cat1: Number, cat2: Number, fat: Number) -> Tuple[Decimal, Decimal, Decimal]:
    """Return the components rounded to 2 places, or raise ValidationError naming every bad field.

    Rounding happens before the range check and the sum so the stored
    total always equals the sum of the stored components.
    """
    values = {name: _component(raw) for name, raw in (("cat1", cat1), ("cat2", cat2), ("fat", fat))}
    malformed = [name for name, value in values.items() if value is None]
    if malformed:
        raise ValidationError(f"Marks must be numbers: {', '.join(malformed)}", fields=malformed)
    bad = [name for name, value in values.items() if value < 0 or value > COMPONENT_LIMITS[name]]
    if bad:
        limits = ", ".join(f"{name} must be between 0 and {COMPONENT_LIMITS[name]}" for name in bad)
        raise ValidationError(f"Marks out of range: {limits}", fields=bad)
    return values["cat1"], values["cat2"], values["fat"]


def compute_total(cat1: Decimal, cat2: Decimal, fat: Decimal) -> Decimal:
    return (cat1 + cat2 + fat).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_percentage(total: Decimal) -> Decimal:
    return (total / TOTAL_DIVISOR * 100).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def calculate(cat1: Number, cat2: Number, fat: Number) -> Dict[str, Decimal]:
    """Validate and compute every stored marks field in one go."""
    c1, c2, f = validate_components(cat1, cat2, fat)
    total = compute_total(c1, c2, f)
    return {
        "cat1": c1,
        "cat2": c2,
        "fat": f,
        "total_marks": total,
        "percentage": compute_percentage(total),
    }


def performance_band(percentage: Number) -> PerformanceBand:
    value = to_decimal(percentage)
    if value >= 85:
        return PerformanceBand.EXCELLENT
    if value >= 70:
        return PerformanceBand.GOOD
    if value >= 50:
        return PerformanceBand.AVERAGE
    return PerformanceBand.POOR
