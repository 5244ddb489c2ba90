import pytest

from CatLife_Agents.breedRegistry.breed_repo import (
    BreedRepo, RegistryLoadError, default_breed_profile, find_breed_profile, get_age_specific_advice,
    get_breed_alerts_for_age, get_health_risks_for_age, get_screenings_for_age, get_upcoming_screenings,
    is_default_profile, list_breed_names, registry_fingerprint, to_summary,
)


def test_lookup_is_case_insensitive_and_uses_aliases():
    assert find_breed_profile("MAINE COON").breed == "Maine Coon"
    assert find_breed_profile("  mainecoon ").breed == "Maine Coon"
    assert find_breed_profile("wegie").breed == "Norwegian Forest Cat"


@pytest.mark.parametrize("name", [None, "", "   ", "Xyzzycat"])
def test_unknown_or_empty_breed_falls_back_to_domestic_shorthair(name):
    p = find_breed_profile(name)
    assert p.breed == "Domestic Shorthair"
    assert is_default_profile(p)


def test_shared_alias_resolves_to_first_declared_breed():
    assert find_breed_profile("longhair").breed == "Persian"
    assert find_breed_profile("tabby").breed == "Domestic Shorthair"


def test_default_profile_values():
    p = default_breed_profile()
    assert (p.ideal_weight.min, p.ideal_weight.max) == (3.5, 5.5)
    assert p.size_category == "medium"


def test_risks_include_emerging_within_two_years():
    mc = find_breed_profile("Maine Coon")
    names = [r.condition for r in get_health_risks_for_age(mc, 2)]
    assert "Hypertrophic Cardiomyopathy (HCM)" in names  # onset 4 <= 2 + 2
    assert "Polycystic Kidney Disease (PKD)" not in names
    kitten = {r.condition for r in get_health_risks_for_age(mc, 0)}
    assert kitten == {"Spinal Muscular Atrophy (SMA)", "Hip Dysplasia"}


def test_screening_lookups():
    mc = find_breed_profile("Maine Coon")
    assert get_screenings_for_age(mc, 0.5) is None
    assert get_screenings_for_age(mc, 4).age_years == 3
    assert get_upcoming_screenings(mc, 3).age_years == 5
    assert get_upcoming_screenings(mc, 10) is None


def test_age_advice_bands_are_half_open_and_not_clamped():
    dsh = find_breed_profile(None)
    assert get_age_specific_advice(dsh, 1.9).focus == "Foundation Health"
    assert get_age_specific_advice(dsh, 2).focus == "Maintenance & Prevention"
    assert get_age_specific_advice(dsh, 20) is None


def test_breed_alerts_for_single_year():
    mc = find_breed_profile("Maine Coon")
    out = get_breed_alerts_for_age(mc, 3)
    assert any("Watch for early signs of Hypertrophic Cardiomyopathy" in a for a in out["alerts"])
    assert out["screenings"][0].startswith("Recommended: Echocardiogram - Early HCM detection")
    assert out["advice"][0] == "Schedule first echocardiogram by age 3-4"

    onset = get_breed_alerts_for_age(mc, 4)
    assert onset["alerts"][0].startswith("Maine Coons typically begin showing Hypertrophic Cardiomyopathy")
    assert onset["screenings"] == []


def test_list_names_and_fingerprint_are_stable():
    names = list_breed_names()
    assert names[0] == "Maine Coon"
    assert "Domestic Shorthair" in names
    ref = registry_fingerprint()
    assert ref.registry_id == "catlife_breed_health"
    assert len(ref.hash) == 12
    assert registry_fingerprint() == ref


def test_profiles_are_read_only():
    mc = find_breed_profile("Maine Coon")
    with pytest.raises(Exception):
        mc.breed = "Tiger"


def test_to_summary_snapshot():
    s = to_summary(find_breed_profile("Maine Coon"))
    assert s.breed == "Maine Coon"
    assert s.ideal_weight == {"min": 5.5, "max": 10.0}
    assert s.size_category == "large"


def test_broken_registry_raises_load_error(tmp_path):
    bad = tmp_path / "db.yaml"
    bad.write_text("breeds: []\n", encoding="utf-8")
    with pytest.raises(RegistryLoadError):
        BreedRepo(bad)

    with pytest.raises(RegistryLoadError):
        BreedRepo(tmp_path / "missing.yaml")


def test_registry_without_default_breed_is_rejected(tmp_path):
    db = tmp_path / "db.yaml"
    db.write_text(
        "default_breed: Domestic Shorthair\n"
        "breeds:\n"
        "  - breed: Manx\n"
        "    size_category: medium\n"
        "    life_expectancy: {min: 8, max: 14}\n"
        "    ideal_weight: {min: 3.5, max: 5.5}\n",
        encoding="utf-8",
    )
    with pytest.raises(RegistryLoadError):
        BreedRepo(db)
