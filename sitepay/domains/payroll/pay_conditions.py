"""Per-site unit pay conditions.

A site's ``unit_pay_condition`` overrides what a staff member earns for one
assignment there. Unknown labels are paid like ``normal``.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class UnitPayCondition(str, Enum):
    NORMAL = "normal"
    HALF = "half"
    FIXED_6000 = "6000"
    FIXED_5000 = "5000"
    FIXED_3000 = "3000"


DEFAULT_CONDITION = UnitPayCondition.NORMAL.value

FIXED_RATES: Dict[str, int] = {
    UnitPayCondition.FIXED_6000.value: 6000,
    UnitPayCondition.FIXED_5000.value: 5000,
    UnitPayCondition.FIXED_3000.value: 3000,
}


def normalize_condition(condition: Optional[str]) -> str:
    """Label reported for an assignment: empty or missing becomes ``normal``."""
    if not condition:
        return DEFAULT_CONDITION
    return condition


def is_known_condition(condition: Optional[str]) -> bool:
    return normalize_condition(condition) in {c.value for c in UnitPayCondition}


def resolve_effective_pay(base_unit_pay: int, condition: Optional[str]) -> int:
    label = normalize_condition(condition)
    if label == UnitPayCondition.HALF.value:
        return base_unit_pay // 2
    if label in FIXED_RATES:
        return FIXED_RATES[label]
    return base_unit_pay
