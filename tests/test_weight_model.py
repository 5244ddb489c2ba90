import pytest

from CatLife_Agents.breedRegistry.breed_models import Range
from CatLife_Agents.simulationEngine.weight_model import (
    calculate_calorie_proxy, determine_health_status, get_ideal_weight_range, get_life_stage, mid_ideal,
)
from factories import make_routine

DSH = Range(min=3.5, max=5.5)


def test_ideal_range_comes_from_registry():
    r = get_ideal_weight_range("Maine Coon")
    assert (r.min, r.max) == (5.5, 10)


@pytest.mark.parametrize("breed", [None, "", "Xyzzycat"])
def test_ideal_range_for_unknown_breed(breed):
    r = get_ideal_weight_range(breed)
    assert (r.min, r.max) == (3.5, 5.5)
    assert mid_ideal(r) == 4.5


def test_calorie_proxy_with_full_routine():
    routine = make_routine(food_amount_oz_per_day=4.0, treats_per_day=2, play_minutes_per_day=20, food_type="mixed")
    # (4 - 4.95) * 0.1 + 2 * 0.02 - 20 * 0.01 + 0.05 (indoor)
    assert calculate_calorie_proxy(routine, "indoor", 4.5, 4.5) == pytest.approx(-0.205)


def test_calorie_proxy_uses_defaults_for_missing_fields():
    routine = make_routine(food_amount_oz_per_day=None, treats_per_day=None, play_minutes_per_day=None, food_type=None)
    assert calculate_calorie_proxy(routine, None, 4.5, 4.5) == pytest.approx(-0.255)


def test_calorie_proxy_lifestyle_and_food_type():
    base = make_routine(food_type="mixed")
    indoor = calculate_calorie_proxy(base, "indoor", 4.5, 4.5)
    outdoor = calculate_calorie_proxy(base, "outdoor", 4.5, 4.5)
    assert indoor - outdoor == pytest.approx(0.1)

    dry = calculate_calorie_proxy(make_routine(food_type="dry"), "indoor", 4.5, 4.5)
    wet = calculate_calorie_proxy(make_routine(food_type="wet"), "indoor", 4.5, 4.5)
    assert dry - wet == pytest.approx(0.04)


def test_current_weight_does_not_change_proxy():
    routine = make_routine()
    assert calculate_calorie_proxy(routine, "indoor", 3.0, 4.5) == calculate_calorie_proxy(routine, "indoor", 9.0, 4.5)


@pytest.mark.parametrize("weight,expected", [
    (4.5, "thriving"),
    (5.0, "ok"),       # 11% off mid
    (5.6, "risky"),    # 24%
    (6.5, "unhealthy"),
])
def test_status_by_deviation(weight, expected):
    assert determine_health_status(weight, DSH, 1, 36, False) == expected


def test_no_vet_downgrades_after_two_years():
    assert determine_health_status(4.5, DSH, 0, 24, False) == "thriving"
    assert determine_health_status(4.5, DSH, 0, 25, False) == "ok"
    assert determine_health_status(5.0, DSH, None, 36, False) == "risky"


def test_geriatric_without_vet_is_downgraded_twice():
    assert determine_health_status(4.5, DSH, 0, 200, False) == "risky"
    assert determine_health_status(6.5, DSH, 0, 200, False) == "unhealthy"


def test_known_conditions_cap_thriving():
    assert determine_health_status(4.5, DSH, 1, 36, True) == "ok"
    assert determine_health_status(4.5, DSH, 2, 36, True) == "thriving"


@pytest.mark.parametrize("months,stage", [
    (0, "kitten"), (11, "kitten"), (12, "young adult"), (36, "adult"),
    (119, "adult"), (120, "senior"), (180, "geriatric"), (240, "geriatric"),
])
def test_life_stage(months, stage):
    assert get_life_stage(months) == stage
