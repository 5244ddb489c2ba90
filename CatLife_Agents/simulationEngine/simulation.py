# simulation.py
# Month-by-month life-course simulation: weight drift, status, notes, alerts, summary.
import math
import random
from typing import Awaitable, Callable, List, Optional, Tuple

#custom imports
from CatLife_Agents.breedRegistry.breed_models import Range
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.states.simulationState import (
    EnhancedSimulationResult, HealthStatus, SimulationAlert, SimulationPoint, SimulationResult,
    STATUS_SCORES,
)
from CatLife_Agents.simulationEngine.weight_model import (
    ADULT_END_MONTHS, GERIATRIC_END_MONTHS, KITTEN_END_MONTHS, SENIOR_END_MONTHS,
    calculate_calorie_proxy, determine_health_status, get_ideal_weight_range, get_life_stage, mid_ideal,
)
from CatLife_Agents.simulationEngine import simulation_enhancer

END_AGE_MONTHS = GERIATRIC_END_MONTHS
DRIFT_FACTOR = 0.02
NOISE_SPAN = 0.05          # uniform in [-0.025, 0.025)
WEIGHT_FLOOR_KG = 1.5
KITTEN_GROWTH = 1.05
SENIOR_DECLINE = 0.998
SENIOR_FLOOR_RATIO = 0.8
MAX_RECOMMENDATIONS = 5

MILESTONES: Tuple[Tuple[int, str, str], ...] = (
    (12, "reaches 1 year old - no longer a kitten!",
     "Transition to adult food if you haven't already. Keep up the play sessions!"),
    (84, "turns 7 - now considered a mature adult.",
     "Consider more frequent vet checkups and monitor for any behavior changes."),
    (120, "turns 10 - entering senior years.",
     "Switch to senior cat food, increase vet visits to twice yearly, and watch for mobility issues."),
    (180, "turns 15 - a wonderful achievement!",
     "Focus on comfort and quality of life. Consider joint supplements and easier-access litter boxes."),
)


class SimulationInputError(ValueError):
    """Start/end ages that cannot describe a simulation window."""


def _validate_window(start_age_months, end_age_months) -> None:
    for label, value in (("start_age_months", start_age_months), ("end_age_months", end_age_months)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SimulationInputError(f"{label} must be a whole number of months, got {value!r}")
        if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
            raise SimulationInputError(f"{label} must be a finite whole number of months, got {value!r}")
        if value < 0:
            raise SimulationInputError(f"{label} must be >= 0, got {value!r}")
    if end_age_months > END_AGE_MONTHS:
        raise SimulationInputError(f"end_age_months cannot exceed {END_AGE_MONTHS}")
    if start_age_months > end_age_months:
        raise SimulationInputError(
            f"start_age_months ({start_age_months}) is after end_age_months ({end_age_months})"
        )


def generate_notes(age_months: int, weight: float, status: HealthStatus, ideal_range: Range, cat_name: str) -> str:
    age_years = age_months // 12
    is_overweight = weight > ideal_range.max
    is_underweight = weight < ideal_range.min

    note = f"At age {age_years}, {cat_name} is a {get_life_stage(age_months)}. "
    if status == "thriving":
        note += "Weight is in a healthy range and care routine looks great!"
    elif status == "ok":
        if is_overweight:
            note += "Weight is slightly above ideal. A bit more playtime could help."
        elif is_underweight:
            note += "Weight is slightly below ideal. Consider consulting your vet."
        else:
            note += "Overall health is stable, but there's room for improvement."
    elif status == "risky":
        if is_overweight:
            note += "Weight is becoming a concern. Consider reducing treats and increasing activity."
        elif is_underweight:
            note += "Weight is low. Please check with your vet to rule out health issues."
        else:
            note += "Some health indicators suggest closer attention is needed."
    else:
        note += "Health needs attention. Please schedule a vet visit soon."
    return note


def generate_alerts(
    points: List[SimulationPoint],
    profile: CatProfile,
    routine: CareRoutine,
    ideal_range: Range,
) -> List[SimulationAlert]:
    alerts: List[SimulationAlert] = []
    cat_name = profile.display_name()
    vet_visits = routine.vet_visits_per_year or 0

    previous: HealthStatus = "thriving"
    warned_risky = warned_unhealthy = warned_weight = warned_vet = False

    for p in points:
        age_years = p.age_months // 12

        if (not warned_risky and p.health_status == "risky"
                and previous not in ("risky", "unhealthy")):
            warned_risky = True
            alerts.append(SimulationAlert(
                id=f"alert-risky-{p.age_months}",
                age_months=p.age_months,
                severity="warning",
                message=f'At age {age_years}, {cat_name}\'s health moves to "risky" status.',
                recommendation="Consider adjusting diet, increasing playtime by 10-15 minutes, "
                               "and scheduling a vet checkup.",
            ))

        if not warned_unhealthy and p.health_status == "unhealthy" and previous != "unhealthy":
            warned_unhealthy = True
            alerts.append(SimulationAlert(
                id=f"alert-unhealthy-{p.age_months}",
                age_months=p.age_months,
                severity="critical",
                message=f'At age {age_years}, {cat_name} reaches "unhealthy" status.',
                recommendation="Urgent: Schedule a vet visit, significantly reduce treats, "
                               "and increase daily activity.",
            ))

        if not warned_weight and p.weight_kg_estimate > ideal_range.max * 1.15:
            warned_weight = True
            alerts.append(SimulationAlert(
                id=f"alert-weight-{p.age_months}",
                age_months=p.age_months,
                severity="warning",
                message=f"{cat_name}'s weight is trending 15%+ above ideal.",
                recommendation="Reduce treats to 1-2 per day, switch to measured portions, "
                               "and add 10+ minutes of active play.",
            ))

        if not warned_vet and p.age_months >= ADULT_END_MONTHS and vet_visits < 1:
            warned_vet = True
            alerts.append(SimulationAlert(
                id=f"alert-vet-{p.age_months}",
                age_months=p.age_months,
                severity="info",
                message=f"{cat_name} is entering their senior years. Regular vet visits become more important.",
                recommendation="Consider scheduling annual or bi-annual vet checkups to catch "
                               "age-related issues early.",
            ))

        previous = p.health_status

    simulated_months = {p.age_months for p in points}
    for month, message, recommendation in MILESTONES:
        if month in simulated_months:
            alerts.append(SimulationAlert(
                id=f"milestone-{month}",
                age_months=month,
                severity="info",
                message=f"{cat_name} {message}",
                recommendation=recommendation,
            ))

    # stable sort keeps generation order within a month
    return sorted(alerts, key=lambda a: a.age_months)


def trajectory_label(avg_score: float) -> str:
    if avg_score >= 3.5:
        return "excellent"
    if avg_score >= 2.5:
        return "good"
    if avg_score >= 1.5:
        return "concerning"
    return "needs attention"


def generate_summary(
    profile: CatProfile,
    routine: CareRoutine,
    points: List[SimulationPoint],
    ideal_range: Range,
) -> Tuple[str, List[str]]:
    cat_name = profile.display_name()

    last = points[-24:]
    avg = sum(STATUS_SCORES[p.health_status] for p in last) / len(last) if last else STATUS_SCORES["ok"]
    label = trajectory_label(avg)

    if label in ("excellent", "good"):
        summary = (f"Based on {cat_name}'s current care routine, the long-term outlook is {label}! "
                   f"With consistent care, {cat_name} has a great chance at a healthy, happy life.")
    else:
        summary = (f"{cat_name}'s health trajectory shows some areas for improvement. "
                   f"With a few adjustments to diet and activity, you can help {cat_name} thrive.")

    recs: List[str] = []

    weight = profile.weight_kg if profile.weight_kg is not None else mid_ideal(ideal_range)
    if weight > ideal_range.max:
        recs.append("Reduce daily food portions by about 10% and limit treats to 2-3 per day.")
        recs.append("Add 10-15 minutes of active play with wand toys or laser pointers.")
    elif weight < ideal_range.min:
        recs.append("Consider increasing food portions slightly and consult your vet about weight gain.")

    if (routine.play_minutes_per_day or 0) < 15:
        recs.append(f"Aim for at least 15-20 minutes of interactive play daily to keep {cat_name} "
                    f"active and engaged.")

    vet_visits = routine.vet_visits_per_year or 0
    if vet_visits < 1:
        recs.append("Schedule at least one annual vet checkup to catch any health issues early.")
    elif (profile.age_years or 0) >= 10 and vet_visits < 2:
        recs.append("For senior cats, consider twice-yearly vet visits for optimal health monitoring.")

    if routine.food_type == "dry":
        recs.append(f"Consider adding some wet food to {cat_name}'s diet for better hydration.")

    if (routine.treats_per_day or 0) > 5:
        recs.append("Reduce treats to 2-3 per day, or switch to lower-calorie options.")

    if len(recs) < 3:
        recs.append(f"Continue providing fresh water and a clean litter box for {cat_name}'s comfort.")
    if len(recs) < 3:
        recs.append("Keep up the love and attention - it's the most important part of cat care!")

    return summary, recs[:MAX_RECOMMENDATIONS]


def run_simulation(
    profile: CatProfile,
    routine: CareRoutine,
    start_age_months: int,
    end_age_months: int = END_AGE_MONTHS,
    *,
    rng: Optional[random.Random] = None,
) -> SimulationResult:
    """Simulate one point per month from start to end (inclusive).

    Pass a seeded `random.Random` as `rng` for reproducible weights.
    """
    _validate_window(start_age_months, end_age_months)
    start, end = int(start_age_months), int(end_age_months)
    rng = rng or random.Random()

    cat_name = profile.display_name()
    ideal = get_ideal_weight_range(profile.breed)
    mid = mid_ideal(ideal)
    weight = profile.weight_kg if profile.weight_kg is not None else mid
    has_conditions = len(profile.known_conditions) > 0

    proxy = calculate_calorie_proxy(routine, profile.indoor_outdoor, weight, mid)
    monthly_drift = proxy * DRIFT_FACTOR

    points: List[SimulationPoint] = []
    for month in range(start, end + 1):
        noise = (rng.random() - 0.5) * NOISE_SPAN
        weight = max(WEIGHT_FLOOR_KG, weight + monthly_drift + noise)

        if month < KITTEN_END_MONTHS:
            weight = min(weight * KITTEN_GROWTH, ideal.max)
        elif month > SENIOR_END_MONTHS:
            weight = max(weight * SENIOR_DECLINE, ideal.min * SENIOR_FLOOR_RATIO)

        status = determine_health_status(weight, ideal, routine.vet_visits_per_year, month, has_conditions)
        milestone = month % 12 == 0 or month == start
        points.append(SimulationPoint(
            age_months=month,
            weight_kg_estimate=round(weight, 2),
            health_status=status,
            notes=generate_notes(month, weight, status, ideal, cat_name) if milestone else "",
        ))

    alerts = generate_alerts(points, profile, routine, ideal)
    summary, recommendations = generate_summary(profile, routine, points, ideal)
    return SimulationResult(points=points, alerts=alerts, summary=summary, recommendations=recommendations)


# ---------------------------
# Entry points
# ---------------------------
def run_quick_simulation(profile: CatProfile, routine: CareRoutine, *, rng: Optional[random.Random] = None) -> List[SimulationPoint]:
    """Yearly milestone points only, for previews.

    Raises SimulationInputError when the cat is already older than END_AGE_MONTHS.
    """
    result = run_simulation(profile, routine, profile.total_age_months(), END_AGE_MONTHS, rng=rng)
    return [p for p in result.points if p.age_months % 12 == 0]


def run_enhanced_simulation(profile: CatProfile, routine: CareRoutine, *, rng: Optional[random.Random] = None) -> EnhancedSimulationResult:
    """Base run plus local enhancement. Raises SimulationInputError past END_AGE_MONTHS."""
    base = run_simulation(profile, routine, profile.total_age_months(), END_AGE_MONTHS, rng=rng)
    return simulation_enhancer.enhance_simulation_locally(base, profile, routine)


async def run_fully_enhanced_simulation(
    profile: CatProfile,
    routine: CareRoutine,
    *,
    rng: Optional[random.Random] = None,
    notes_fetcher: Optional[Callable[[dict], Awaitable[dict]]] = None,
) -> EnhancedSimulationResult:
    """Base run, local enhancement, then personalized notes when available.

    Raises SimulationInputError past END_AGE_MONTHS; note failures never raise.
    """
    base = run_simulation(profile, routine, profile.total_age_months(), END_AGE_MONTHS, rng=rng)
    return await simulation_enhancer.enhance_simulation_with_gpt(base, profile, routine, fetcher=notes_fetcher)
