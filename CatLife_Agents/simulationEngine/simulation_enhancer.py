# simulation_enhancer.py
# Layers breed knowledge, trend analysis and (optionally) personalized notes
# on top of a finished base simulation. The base result is never mutated.
import os
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

import httpx
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

#custom imports
from CatLife_Agents.breedRegistry.breed_models import BreedHealthProfile
from CatLife_Agents.breedRegistry.breed_repo import (
    find_breed_profile, get_age_specific_advice, get_health_risks_for_age, is_default_profile, to_summary,
)
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.states.simulationState import (
    EnhancedMilestoneNote, EnhancedSimulationPoint, EnhancedSimulationResult, HealthStatus, HealthTrajectory,
    HealthTrend, ProgressiveRecommendation, SimulationAlert, SimulationPoint, SimulationResult,
    STATUS_SCORES, status_from_score,
)
from CatLife_Agents.chatAgents import milestone_notes_agent

logger = logging.getLogger(__name__)

MILESTONE_NOTES_URL = os.getenv("CATLIFE_MILESTONE_NOTES_URL", "")
NOTES_TIMEOUT_S = float(os.getenv("CATLIFE_NOTES_TIMEOUT_S", "8"))

TREND_THRESHOLD = 0.3
DEDUP_PREFIX_CHARS = 30
MAX_ENHANCED_RECOMMENDATIONS = 6
TIMELINE_END_YEAR = 20

LOW_ACTIVITY = "Low activity level (less than 10 min/day)"
NO_VET = "No regular vet visits"

NotesFetcher = Callable[[dict], Awaitable[dict]]


# ---------------------------
# Trajectory
# ---------------------------
def _mean_score(points: List[SimulationPoint]) -> float:
    return sum(STATUS_SCORES[p.health_status] for p in points) / len(points)


def extrapolate_status(avg_score: float, trend: HealthTrend, target_year: int) -> HealthStatus:
    adjusted = avg_score
    if trend == "declining":
        adjusted -= 0.5
    elif trend == "improving":
        adjusted += 0.3
    if target_year >= 15:
        adjusted -= 0.3  # senior years
    return status_from_score(adjusted)


def _care_factors(profile: CatProfile, routine: CareRoutine) -> tuple[List[str], List[str]]:
    risk: List[str] = []
    positive: List[str] = []

    play = routine.play_minutes_per_day or 0
    vet = routine.vet_visits_per_year or 0
    treats = routine.treats_per_day or 0

    if play < 10:
        risk.append(LOW_ACTIVITY)
    elif play >= 20:
        positive.append("Good daily activity level")

    if vet < 1:
        risk.append(NO_VET)
    elif vet >= 2:
        positive.append("Regular vet checkups")

    if treats > 5:
        risk.append("High treat consumption")
    elif treats <= 2:
        positive.append("Controlled treat intake")

    if routine.food_type == "dry":
        risk.append("Dry food only (lower hydration)")
    elif routine.food_type in ("wet", "mixed"):
        positive.append("Good food variety for hydration")

    ideal = find_breed_profile(profile.breed).ideal_weight
    if profile.weight_kg:
        if profile.weight_kg > ideal.max:
            risk.append("Current weight above ideal range")
        elif ideal.min <= profile.weight_kg <= ideal.max:
            positive.append("Weight in healthy range")

    if profile.known_conditions:
        risk.append(f"Existing health conditions: {', '.join(profile.known_conditions)}")

    current_age = profile.age_years if profile.age_years is not None else 1
    if current_age >= 10 and vet < 2:
        risk.append("Senior cat needs more frequent vet visits")

    return risk, positive


def analyze_trajectory(points: List[SimulationPoint], profile: CatProfile, routine: CareRoutine) -> HealthTrajectory:
    risk, positive = _care_factors(profile, routine)

    yearly = [p for p in points if p.age_months % 12 == 0]
    if len(yearly) < 2:
        return HealthTrajectory(risk_factors=risk, positive_factors=positive)

    avg = _mean_score(yearly)
    mid = len(yearly) // 2
    first, second = _mean_score(yearly[:mid]), _mean_score(yearly[mid:])
    if second > first + TREND_THRESHOLD:
        trend: HealthTrend = "improving"
    elif second < first - TREND_THRESHOLD:
        trend = "declining"
    else:
        trend = "stable"

    by_month = {p.age_months: p.health_status for p in yearly}
    return HealthTrajectory(
        trend=trend,
        projected_status_at_year10=by_month.get(120) or extrapolate_status(avg, trend, 10),
        projected_status_at_year15=by_month.get(180) or extrapolate_status(avg, trend, 15),
        risk_factors=risk,
        positive_factors=positive,
        average_health_score=avg,
    )


# ---------------------------
# Breed alerts
# ---------------------------
def _slug(text: str) -> str:
    return "-".join(text.split()).lower()


def _fmt_years(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def generate_breed_specific_alerts(
    profile: CatProfile,
    routine: CareRoutine,
    points: List[SimulationPoint],
) -> List[SimulationAlert]:
    """Pre-warning/onset alerts per breed risk plus one alert per screening,
    restricted to the simulated window."""
    breed = find_breed_profile(profile.breed)
    cat_name = profile.display_name()
    if points:
        start, end = points[0].age_months, points[-1].age_months
    else:
        start = end = profile.total_age_months()

    alerts: List[SimulationAlert] = []
    for risk in breed.health_risks:
        onset = round(risk.typical_onset_years * 12)
        if not start <= onset <= end:
            continue
        high = risk.risk_level == "high"
        pre = max(onset - 12, start)
        if pre != onset:
            alerts.append(SimulationAlert(
                id=f"breed-{_slug(risk.condition)}-prewarning-{pre}",
                age_months=pre,
                severity="warning" if high else "info",
                message=f"{cat_name} is approaching the typical onset age for {risk.condition} in {breed.breed}s.",
                recommendation=f"Start monitoring: {risk.monitoring_advice}",
            ))
        alerts.append(SimulationAlert(
            id=f"breed-{_slug(risk.condition)}-onset-{onset}",
            age_months=onset,
            severity="critical" if high else "warning",
            message=f"{breed.breed}s typically begin showing {risk.condition} "
                    f"around age {_fmt_years(risk.typical_onset_years)}.",
            recommendation=risk.monitoring_advice,
        ))

    for sched in breed.screening_schedule:
        month = round(sched.age_years * 12)
        if not start <= month <= end:
            continue
        alerts.append(SimulationAlert(
            id=f"breed-screening-{_fmt_years(sched.age_years)}",
            age_months=month,
            severity="info",
            message=f"Year {_fmt_years(sched.age_years)} screening recommended for {cat_name}.",
            recommendation=f"Schedule: {', '.join(sched.screenings)}. {sched.reason}",
        ))

    return sorted(alerts, key=lambda a: a.age_months)


def merge_alerts(base: List[SimulationAlert], extra: List[SimulationAlert]) -> List[SimulationAlert]:
    """Sort by age and drop alerts sharing an age and a message prefix.

    The prefix comparison is approximate; the first alert seen wins.
    """
    merged: List[SimulationAlert] = []
    seen = set()
    for alert in sorted([*base, *extra], key=lambda a: a.age_months):
        key = (alert.age_months, alert.message[:DEDUP_PREFIX_CHARS])
        if key in seen:
            continue
        seen.add(key)
        merged.append(alert)
    return merged


# ---------------------------
# Progressive timeline
# ---------------------------
def _year_recommendations(
    year: int,
    profile: CatProfile,
    routine: CareRoutine,
    trajectory: HealthTrajectory,
    breed: BreedHealthProfile,
) -> List[ProgressiveRecommendation]:
    cat_name = profile.display_name()
    recs: List[ProgressiveRecommendation] = []

    screening = next((s for s in breed.screening_schedule if s.age_years == year), None)
    if screening:
        recs.append(ProgressiveRecommendation(
            age_years=year, category="screening",
            recommendation=", ".join(screening.screenings),
            reason=screening.reason,
            priority="high" if year >= 7 else "medium",
        ))

    for risk in breed.health_risks:
        if risk.typical_onset_years == year:
            recs.append(ProgressiveRecommendation(
                age_years=year, category="monitoring",
                recommendation=f"Begin {risk.condition} monitoring",
                reason=risk.monitoring_advice,
                priority="high" if risk.risk_level == "high" else "medium",
            ))

    if year == 1:
        recs.append(ProgressiveRecommendation(
            age_years=year, category="screening",
            recommendation="Complete first-year vaccinations and establish baseline bloodwork",
            reason="Sets foundation for lifelong health monitoring",
            priority="high",
        ))
    if year == 7:
        recs.append(ProgressiveRecommendation(
            age_years=year, category="screening",
            recommendation="Begin senior wellness screening",
            reason=f"{cat_name} enters mature adult years - early detection is key",
            priority="high",
        ))
        if (routine.vet_visits_per_year or 0) < 2:
            recs.append(ProgressiveRecommendation(
                age_years=year, category="monitoring",
                recommendation="Increase to twice-yearly vet visits",
                reason="Senior cats benefit from more frequent health monitoring",
                priority="medium",
            ))
    if year == 10:
        recs.append(ProgressiveRecommendation(
            age_years=year, category="diet",
            recommendation="Evaluate transition to senior cat food formula",
            reason="Senior formulas support kidney function and joint health",
            priority="medium",
        ))
    if year == 12:
        recs.append(ProgressiveRecommendation(
            age_years=year, category="comfort",
            recommendation="Consider orthopedic bedding and easier litter box access",
            reason="Supports mobility and comfort in senior years",
            priority="medium",
        ))

    current_age = profile.age_years if profile.age_years is not None else 1
    if trajectory.trend == "declining" and year >= current_age + 2:
        if LOW_ACTIVITY in trajectory.risk_factors:
            recs.append(ProgressiveRecommendation(
                age_years=year, category="activity",
                recommendation="Gradually increase daily play to 15-20 minutes",
                reason="Improving activity can reverse declining health trajectory",
                priority="high",
            ))
        if NO_VET in trajectory.risk_factors:
            recs.append(ProgressiveRecommendation(
                age_years=year, category="monitoring",
                recommendation="Schedule a comprehensive health check",
                reason="Regular monitoring essential for declining health trajectory",
                priority="high",
            ))
    return recs


def generate_progressive_timeline(
    profile: CatProfile,
    routine: CareRoutine,
    trajectory: HealthTrajectory,
    breed: BreedHealthProfile,
) -> List[ProgressiveRecommendation]:
    start = max(1, profile.age_years if profile.age_years is not None else 1)
    timeline: List[ProgressiveRecommendation] = []
    for year in range(start, TIMELINE_END_YEAR + 1):
        timeline.extend(_year_recommendations(year, profile, routine, trajectory, breed))
    return timeline


# ---------------------------
# Summary / recommendations
# ---------------------------
def generate_enhanced_summary(summary: str, trajectory: HealthTrajectory, breed: BreedHealthProfile, profile: CatProfile) -> str:
    if trajectory.trend == "declining":
        summary += " The health trajectory shows some decline over time - small changes now can make a big difference."
    elif trajectory.trend == "improving":
        summary += " Great news - the health trajectory is improving with current care!"

    if not is_default_profile(breed):
        avg_lifespan = (breed.life_expectancy.min + breed.life_expectancy.max) / 2
        summary += (f" As a {breed.breed}, {profile.display_name()} has an average life expectancy of "
                    f"{int(avg_lifespan + 0.5)} years with proper care.")
    return summary


def generate_enhanced_recommendations(
    recommendations: List[str],
    trajectory: HealthTrajectory,
    breed: BreedHealthProfile,
    profile: CatProfile,
) -> List[str]:
    recs = list(recommendations)
    cat_name = profile.display_name()

    def mentioned(fragment: str) -> bool:
        return any(fragment in r for r in recs)

    for factor in trajectory.risk_factors:
        if "Low activity" in factor and not mentioned("play"):
            recs.append(f"Increase {cat_name}'s daily play sessions to at least 15 minutes.")
        if "vet visits" in factor and not mentioned("vet"):
            recs.append("Schedule regular vet checkups - at least annually, twice yearly for seniors.")
        if "treat" in factor and not mentioned("treat"):
            recs.append("Reduce daily treats to 2-3 to support healthy weight.")

    current_age = profile.age_years if profile.age_years is not None else 1
    for risk in breed.health_risks:
        upcoming = current_age < risk.typical_onset_years <= current_age + 3
        if upcoming and risk.risk_level == "high" and not mentioned(risk.condition):
            recs.append(f"{breed.breed}s are prone to {risk.condition}. {risk.monitoring_advice}")

    band = get_age_specific_advice(breed, current_age)
    if band:
        fresh = next((a for a in band.advice if not mentioned(a[:20])), None)
        if fresh:
            recs.append(fresh)

    return recs[:MAX_ENHANCED_RECOMMENDATIONS]


# ---------------------------
# Local enhancement
# ---------------------------
def enhance_simulation_locally(result: SimulationResult, profile: CatProfile, routine: CareRoutine) -> EnhancedSimulationResult:
    """Deterministic enhancement with no I/O; always available."""
    breed = find_breed_profile(profile.breed)
    trajectory = analyze_trajectory(result.points, profile, routine)

    alerts = merge_alerts(result.alerts, generate_breed_specific_alerts(profile, routine, result.points))

    enhanced_points = [
        EnhancedSimulationPoint(
            **p.model_dump(),
            breed_health_risks=get_health_risks_for_age(breed, p.age_months // 12),
        )
        for p in result.points
    ]

    return EnhancedSimulationResult(
        points=[p.model_copy() for p in result.points],
        alerts=alerts,
        summary=generate_enhanced_summary(result.summary, trajectory, breed, profile),
        recommendations=generate_enhanced_recommendations(result.recommendations, trajectory, breed, profile),
        enhanced_points=enhanced_points,
        trajectory=trajectory,
        breed_profile=to_summary(breed),
        progressive_timeline=generate_progressive_timeline(profile, routine, trajectory, breed),
        is_enhanced=True,
    )


# ---------------------------
# External personalized notes
# ---------------------------
async def fetch_milestone_notes_http(
    payload: dict,
    *,
    url: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> dict:
    """POST the payload to the milestone-note service; non-2xx raises."""
    url = url or MILESTONE_NOTES_URL
    if client is not None:
        r = await client.post(url, json=payload)
        r.raise_for_status()
        return r.json()
    async with httpx.AsyncClient(timeout=NOTES_TIMEOUT_S) as c:
        r = await c.post(url, json=payload)
        r.raise_for_status()
        return r.json()


async def openai_notes_fetcher(payload: dict) -> dict:
    return await asyncio.to_thread(milestone_notes_agent.generate_milestone_notes, payload)


def default_notes_fetcher() -> NotesFetcher:
    return fetch_milestone_notes_http if MILESTONE_NOTES_URL else openai_notes_fetcher


def _camel_keys(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {to_camel(str(k)): _camel_keys(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_camel_keys(v) for v in obj]
    return obj


def build_notes_payload(result: EnhancedSimulationResult, yearly: List[SimulationPoint], profile: CatProfile, routine: CareRoutine) -> dict:
    """camelCase all the way down, matching the note objects that come back."""
    return _camel_keys({
        "cat_profile": profile.model_dump(mode="json"),
        "care_routine": routine.model_dump(mode="json"),
        "simulation_points": [p.model_dump(mode="json") for p in yearly],
        "trajectory": result.trajectory.model_dump(mode="json"),
    })


def _parse_notes(data) -> Optional[List[EnhancedMilestoneNote]]:
    if not isinstance(data, dict) or not data.get("success") or not isinstance(data.get("notes"), list):
        return None
    notes: List[EnhancedMilestoneNote] = []
    for raw in data["notes"]:
        try:
            notes.append(EnhancedMilestoneNote.model_validate(raw))
        except ValidationError as e:
            logger.warning("skipping malformed milestone note: %s", e.errors()[:1])
    return notes or None


def apply_milestone_notes(result: EnhancedSimulationResult, notes: List[EnhancedMilestoneNote]) -> EnhancedSimulationResult:
    by_year: dict = {}
    for n in notes:
        by_year.setdefault(n.age_years, n)  # first note for a year wins

    def note_for(age_months: int) -> Optional[EnhancedMilestoneNote]:
        return by_year.get(age_months // 12) if age_months % 12 == 0 else None

    enhanced = []
    for p in result.enhanced_points:
        note = note_for(p.age_months)
        if note:
            p = p.model_copy(update={"enhanced_note": note, "notes": note.personalized_note})
        enhanced.append(p)

    points = []
    for p in result.points:
        note = note_for(p.age_months)
        points.append(p.model_copy(update={"notes": note.personalized_note}) if note else p)
    return result.model_copy(update={"points": points, "enhanced_points": enhanced})


async def enhance_simulation_with_gpt(
    result: SimulationResult,
    profile: CatProfile,
    routine: CareRoutine,
    *,
    fetcher: Optional[NotesFetcher] = None,
    timeout_s: Optional[float] = None,
) -> EnhancedSimulationResult:
    """Local enhancement first, then one best-effort call for personalized notes.

    Any failure returns the local result unchanged.
    """
    local = enhance_simulation_locally(result, profile, routine)
    return await upgrade_with_milestone_notes(local, profile, routine, fetcher=fetcher, timeout_s=timeout_s)


async def upgrade_with_milestone_notes(
    local: EnhancedSimulationResult,
    profile: CatProfile,
    routine: CareRoutine,
    *,
    fetcher: Optional[NotesFetcher] = None,
    timeout_s: Optional[float] = None,
) -> EnhancedSimulationResult:
    """Apply personalized notes to an already enhanced result; `local` comes back on any failure."""
    yearly = [p for p in local.points if p.age_months % 12 == 0]
    if not yearly:
        return local

    fetcher = fetcher or default_notes_fetcher()
    payload = build_notes_payload(local, yearly, profile, routine)
    try:
        data = await asyncio.wait_for(fetcher(payload), timeout=timeout_s or NOTES_TIMEOUT_S)
    except asyncio.TimeoutError:
        logger.warning("milestone notes timed out after %ss, using local enhancement only", timeout_s or NOTES_TIMEOUT_S)
        return local
    except httpx.HTTPStatusError as e:
        logger.warning("milestone notes returned %s, using local enhancement only", e.response.status_code)
        return local
    except Exception:
        logger.exception("milestone notes call failed, using local enhancement only")
        return local

    notes = _parse_notes(data)
    if notes is None:
        logger.warning("milestone notes response had no usable notes, using local enhancement only")
        return local
    return apply_milestone_notes(local, notes)
