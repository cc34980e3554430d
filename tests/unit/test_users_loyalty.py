import pytest

from travel_checkout.users.loyalty import (
    BRONZE,
    DEFAULT,
    GOLD,
    SILVER,
    calculate_level,
    calculate_progress,
    level_from_number,
)


@pytest.mark.parametrize("spent,level", [
    (0, DEFAULT),
    (1, BRONZE),
    (999_999, BRONZE),
    (1_000_000, SILVER),
    (2_999_999, SILVER),
    (3_000_000, GOLD),
])
def test_calculate_level(spent, level):
    assert calculate_level(spent) == level

def test_level_from_number():
    assert level_from_number(0) == DEFAULT
    assert level_from_number(2) == SILVER
    assert level_from_number(None) == DEFAULT

def test_calculate_progress():
    assert calculate_progress(500_000, BRONZE) == 50.0
    assert calculate_progress(2_000_000, SILVER) == 50.0
    assert calculate_progress(10, GOLD) == 100.0
    assert calculate_progress(0, DEFAULT) == 0.0
