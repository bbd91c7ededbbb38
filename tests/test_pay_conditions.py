import pytest

from sitepay.domains.payroll.pay_conditions import (
    UnitPayCondition,
    is_known_condition,
    normalize_condition,
    resolve_effective_pay,
)


@pytest.mark.parametrize(
    "condition, expected",
    [
        ("normal", 15000),
        ("", 15000),
        (None, 15000),
        ("half", 7500),
        ("6000", 6000),
        ("5000", 5000),
        ("3000", 3000),
        ("double", 15000),
        ("HALF", 15000),
        (" 6000", 15000),
    ],
)
def test_resolve_effective_pay_table(condition, expected):
    assert resolve_effective_pay(15000, condition) == expected


def test_half_floors_odd_amounts():
    assert resolve_effective_pay(15001, "half") == 7500
    assert resolve_effective_pay(1, "half") == 0
    assert resolve_effective_pay(0, "half") == 0


@pytest.mark.parametrize("base", [0, 1, 5999, 6000, 20000])
def test_fixed_rates_ignore_base_pay(base):
    assert resolve_effective_pay(base, "6000") == 6000
    assert resolve_effective_pay(base, "5000") == 5000
    assert resolve_effective_pay(base, "3000") == 3000


def test_every_label_resolves_to_non_negative_int():
    labels = [c.value for c in UnitPayCondition] + ["", "unknown", "0", "-1", "normal "]
    for label in labels:
        value = resolve_effective_pay(10000, label)
        assert isinstance(value, int)
        assert value >= 0


def test_normalize_condition_defaults_blank_to_normal():
    assert normalize_condition("") == "normal"
    assert normalize_condition(None) == "normal"
    assert normalize_condition("half") == "half"
    # unrecognised labels are reported as stored
    assert normalize_condition("legacy") == "legacy"


def test_is_known_condition():
    assert is_known_condition("5000")
    assert is_known_condition("")
    assert not is_known_condition("4000")
