# weight_model.py
from typing import Dict, Optional

#custom imports
from CatLife_Agents.breedRegistry.breed_models import Range
from CatLife_Agents.breedRegistry.breed_repo import find_breed_profile, is_default_profile
from CatLife_Agents.states.catState import CareRoutine
from CatLife_Agents.states.simulationState import HealthStatus

# ---------------------------
# Reference data (kg / months)
# ---------------------------
# Coarse table used only when the registry falls back to its generic profile.
FALLBACK_WEIGHT_RANGES: Dict[str, Range] = {
    "small": Range(min=2.5, max=4.0),
    "medium": Range(min=4.0, max=5.5),
    "large": Range(min=5.5, max=8.0),
    "default": Range(min=3.5, max=5.5),
}

FALLBACK_BREED_SIZES: Dict[str, str] = {
    "maine coon": "large",
    "ragdoll": "large",
    "norwegian forest": "large",
    "british shorthair": "large",
    "savannah": "large",
    "bengal": "medium",
    "persian": "medium",
    "siamese": "small",
    "abyssinian": "small",
    "devon rex": "small",
    "cornish rex": "small",
    "sphynx": "small",
    "domestic shorthair": "medium",
    "domestic longhair": "medium",
    "tabby": "medium",
    "tuxedo": "medium",
    "calico": "medium",
}

KITTEN_END_MONTHS = 12
YOUNG_ADULT_END_MONTHS = 36
ADULT_END_MONTHS = 120      # 10 years
SENIOR_END_MONTHS = 180     # 15 years
GERIATRIC_END_MONTHS = 240  # 20 years

# calorie proxy defaults and coefficients
DEFAULT_FOOD_OZ = 3.5
DEFAULT_TREATS = 2
DEFAULT_PLAY_MINUTES = 15
FOOD_COEF = 0.1
TREAT_COEF = 0.02
PLAY_COEF = 0.01
LIFESTYLE_ADJ = 0.05
FOOD_TYPE_ADJ = 0.02


def get_ideal_weight_range(breed: Optional[str]) -> Range:
    profile = find_breed_profile(breed)
    if not is_default_profile(profile):
        return profile.ideal_weight

    if not breed:
        return FALLBACK_WEIGHT_RANGES["default"]
    size = FALLBACK_BREED_SIZES.get(breed.strip().lower(), "default")
    return FALLBACK_WEIGHT_RANGES[size]


def mid_ideal(ideal: Range) -> float:
    return (ideal.min + ideal.max) / 2


def calculate_calorie_proxy(
    routine: CareRoutine,
    indoor_outdoor: Optional[str],
    current_weight: float,
    ideal_weight: float,
) -> float:
    """Unitless drift tendency: positive means gain, negative means loss.

    `current_weight` is accepted for interface symmetry and does not enter the
    formula.
    """
    proxy = 0.0

    food_oz = routine.food_amount_oz_per_day if routine.food_amount_oz_per_day is not None else DEFAULT_FOOD_OZ
    ideal_food_oz = (ideal_weight * 2.2) * 0.5  # ~0.5 oz per lb
    proxy += (food_oz - ideal_food_oz) * FOOD_COEF

    treats = routine.treats_per_day if routine.treats_per_day is not None else DEFAULT_TREATS
    proxy += treats * TREAT_COEF

    play = routine.play_minutes_per_day if routine.play_minutes_per_day is not None else DEFAULT_PLAY_MINUTES
    proxy -= play * PLAY_COEF

    if indoor_outdoor == "indoor":
        proxy += LIFESTYLE_ADJ
    elif indoor_outdoor in ("outdoor", "mixed"):
        proxy -= LIFESTYLE_ADJ

    if routine.food_type in ("wet", "raw"):
        proxy -= FOOD_TYPE_ADJ
    elif routine.food_type == "dry":
        proxy += FOOD_TYPE_ADJ

    return proxy


def determine_health_status(
    weight: float,
    ideal_range: Range,
    vet_visits_per_year: Optional[float],
    age_months: int,
    has_known_conditions: bool,
) -> HealthStatus:
    mid = mid_ideal(ideal_range)
    deviation = abs(weight - mid) / mid

    if deviation < 0.1:
        status: HealthStatus = "thriving"
    elif deviation < 0.2:
        status = "ok"
    elif deviation < 0.35:
        status = "risky"
    else:
        status = "unhealthy"

    # downgrades only, applied in order
    vet_visits = vet_visits_per_year or 0
    if vet_visits == 0 and age_months > 24:
        if status == "thriving":
            status = "ok"
        elif status == "ok":
            status = "risky"

    if age_months > SENIOR_END_MONTHS and vet_visits < 1 and status != "unhealthy":
        status = "ok" if status == "thriving" else "risky"

    if has_known_conditions and vet_visits < 2 and status == "thriving":
        status = "ok"

    return status


def get_life_stage(age_months: int) -> str:
    if age_months < KITTEN_END_MONTHS:
        return "kitten"
    if age_months < YOUNG_ADULT_END_MONTHS:
        return "young adult"
    if age_months < ADULT_END_MONTHS:
        return "adult"
    if age_months < SENIOR_END_MONTHS:
        return "senior"
    return "geriatric"
