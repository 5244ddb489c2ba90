import random
import pytest

from CatLife_Agents.breedRegistry.breed_models import Range
from CatLife_Agents.states.simulationState import SimulationPoint
from CatLife_Agents.simulationEngine.simulation import (
    END_AGE_MONTHS, WEIGHT_FLOOR_KG, SimulationInputError, generate_alerts, generate_notes, generate_summary,
    run_enhanced_simulation, run_fully_enhanced_simulation, run_quick_simulation, run_simulation, trajectory_label,
)
from factories import make_profile, make_routine

DSH = Range(min=3.5, max=5.5)


def _points(statuses, weight=4.5):
    return [SimulationPoint(age_months=i, weight_kg_estimate=weight, health_status=s) for i, s in enumerate(statuses)]


def test_one_point_per_month_inclusive(profile, routine, rng):
    result = run_simulation(profile, routine, 36, END_AGE_MONTHS, rng=rng)
    assert len(result.points) == 240 - 36 + 1
    assert [p.age_months for p in result.points] == list(range(36, 241))


def test_single_month_window(profile, routine, rng):
    result = run_simulation(profile, routine, 240, 240, rng=rng)
    assert len(result.points) == 1
    assert result.points[0].notes


def test_notes_only_on_start_and_birthdays(routine, rng):
    profile = make_profile(age_years=3, age_months=5)
    result = run_simulation(profile, routine, profile.total_age_months(), rng=rng)
    for p in result.points:
        expected = p.age_months % 12 == 0 or p.age_months == 41
        assert bool(p.notes) == expected, p.age_months


def test_weight_never_drops_below_floor(rng):
    profile = make_profile(weight_kg=2.0, indoor_outdoor="outdoor")
    routine = make_routine(food_amount_oz_per_day=0, treats_per_day=0, play_minutes_per_day=120, food_type="wet")
    result = run_simulation(profile, routine, 36, rng=rng)
    assert min(p.weight_kg_estimate for p in result.points) >= WEIGHT_FLOOR_KG
    # geriatric floor is 80% of the ideal minimum
    assert all(p.weight_kg_estimate >= 2.8 for p in result.points if p.age_months > 180)


def test_seeded_runs_are_reproducible(profile, routine):
    a = run_simulation(profile, routine, 36, rng=random.Random(7))
    b = run_simulation(profile, routine, 36, rng=random.Random(7))
    assert a == b


def test_alerts_are_sorted_by_age(profile, rng):
    routine = make_routine(vet_visits_per_year=0, play_minutes_per_day=0, treats_per_day=8)
    result = run_simulation(profile, routine, 12, rng=rng)
    ages = [a.age_months for a in result.alerts]
    assert ages == sorted(ages)


@pytest.mark.parametrize("start,end", [
    (-1, 240), (12, 241), (50, 40), (1.5, 240), (True, 240), ("12", 240), (float("nan"), 240),
])
def test_bad_windows_raise(profile, routine, start, end):
    with pytest.raises(SimulationInputError):
        run_simulation(profile, routine, start, end)


async def test_entry_points_reject_cats_past_twenty(routine):
    old = make_profile(age_years=21)
    with pytest.raises(SimulationInputError):
        run_quick_simulation(old, routine)
    with pytest.raises(SimulationInputError):
        run_enhanced_simulation(old, routine)
    with pytest.raises(SimulationInputError):
        await run_fully_enhanced_simulation(old, routine)


def test_integral_float_ages_are_accepted(profile, routine, rng):
    assert len(run_simulation(profile, routine, 228.0, rng=rng).points) == 13


def test_maine_coon_year_one_run():
    profile = make_profile(name="Milo", breed="Maine Coon", age_years=1, weight_kg=4.5)
    routine = make_routine(vet_visits_per_year=2, play_minutes_per_day=20, food_type="dry", treats_per_day=2)
    result = run_enhanced_simulation(profile, routine, rng=random.Random(42))
    assert len(result.points) == 229
    screening = next(a for a in result.alerts if a.id == "breed-screening-3")
    assert screening.age_months == 36
    assert "Echocardiogram" in screening.recommendation
    assert {f"milestone-{m}" for m in (12, 84, 120, 180)} <= {a.id for a in result.alerts}


def test_no_vet_visits_gives_one_senior_vet_alert(profile, rng):
    result = run_simulation(profile, make_routine(vet_visits_per_year=0), 36, rng=rng)
    vet = [a for a in result.alerts if a.id.startswith("alert-vet-")]
    assert len(vet) == 1
    assert vet[0].age_months == 120
    assert vet[0].severity == "info"


def test_heavy_cat_is_unhealthy_throughout(rng):
    profile = make_profile(age_years=1, weight_kg=8.25)
    routine = make_routine(food_amount_oz_per_day=4.95, treats_per_day=0, play_minutes_per_day=0, vet_visits_per_year=2)
    result = run_simulation(profile, routine, profile.total_age_months(), rng=rng)
    assert {p.health_status for p in result.points} == {"unhealthy"}
    unhealthy = [a for a in result.alerts if a.id.startswith("alert-unhealthy-")]
    assert [a.age_months for a in unhealthy] == [12]
    assert unhealthy[0].severity == "critical"
    assert any(a.id == "alert-weight-12" for a in result.alerts)


def test_unknown_breed_uses_generic_profile(rng):
    profile = make_profile(breed="Xyzzycat")
    result = run_enhanced_simulation(profile, make_routine(), rng=rng)
    assert result.breed_profile.breed == "Domestic Shorthair"
    assert result.breed_profile.ideal_weight == {"min": 3.5, "max": 5.5}
    assert "life expectancy" not in result.summary


def test_status_alerts_fire_once():
    profile, routine = make_profile(), make_routine()
    alerts = generate_alerts(_points(["thriving", "risky", "ok", "risky", "unhealthy", "unhealthy"]), profile, routine, DSH)
    assert [a.id for a in alerts] == ["alert-risky-1", "alert-unhealthy-4"]


def test_risky_alert_skipped_after_unhealthy():
    profile, routine = make_profile(), make_routine()
    alerts = generate_alerts(_points(["unhealthy", "risky"]), profile, routine, DSH)
    assert [a.id for a in alerts] == ["alert-unhealthy-0"]


def test_generate_notes_wording():
    note = generate_notes(36, 4.5, "thriving", DSH, "Luna")
    assert note.startswith("At age 3, Luna is a adult.")
    assert "healthy range" in note
    assert "slightly above ideal" in generate_notes(36, 5.8, "ok", DSH, "Luna")
    assert "Weight is low" in generate_notes(36, 3.0, "risky", DSH, "Luna")
    assert "schedule a vet visit soon" in generate_notes(36, 9.0, "unhealthy", DSH, "Luna")


@pytest.mark.parametrize("score,label", [(4, "excellent"), (3.5, "excellent"), (2.5, "good"), (1.5, "concerning"), (1.2, "needs attention")])
def test_trajectory_label_thresholds(score, label):
    assert trajectory_label(score) == label


def test_summary_pads_to_three_recommendations():
    summary, recs = generate_summary(make_profile(), make_routine(), _points(["thriving"] * 24), DSH)
    assert "long-term outlook is excellent" in summary
    assert len(recs) == 2
    assert recs[-1].startswith("Keep up the love")


def test_summary_caps_recommendations():
    profile = make_profile(weight_kg=7.0)
    routine = make_routine(play_minutes_per_day=0, vet_visits_per_year=0, food_type="dry", treats_per_day=6)
    summary, recs = generate_summary(profile, routine, _points(["unhealthy"] * 24), DSH)
    assert "areas for improvement" in summary
    assert len(recs) == 5


def test_quick_simulation_is_yearly(profile, routine, rng):
    points = run_quick_simulation(profile, routine, rng=rng)
    assert [p.age_months for p in points] == list(range(36, 241, 12))


async def test_fully_enhanced_uses_notes_fetcher(profile, routine, rng):
    async def fetcher(payload):
        assert payload["catProfile"]["name"] == "Luna"
        return {"success": True, "notes": [{"ageYears": 5, "personalizedNote": "Luna at five."}]}

    result = await run_fully_enhanced_simulation(profile, routine, rng=rng, notes_fetcher=fetcher)
    year5 = next(p for p in result.enhanced_points if p.age_months == 60)
    assert year5.enhanced_note.personalized_note == "Luna at five."
    assert year5.notes == "Luna at five."
