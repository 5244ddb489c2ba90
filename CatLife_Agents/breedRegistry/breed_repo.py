# breed_repo.py
import json, yaml, hashlib, logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

#custom imports
from CatLife_Agents.breedRegistry.breed_models import (
    AgeSpecificAdvice, BreedHealthProfile, HealthRisk, RegistryRef, ScreeningSchedule,
)
from CatLife_Agents.states.simulationState import BreedProfileSummary

logger = logging.getLogger(__name__)

DB_PATH = Path(__file__).with_name("breed_health_db.yaml")


class RegistryLoadError(RuntimeError):
    """The shipped breed registry is missing or does not validate."""


class BreedRepo:
    """Read-only view over the breed health document.

    Built once per process through `get_repo()`; there is no mutation API.
    """

    def __init__(self, path: Path = DB_PATH):
        self.path = Path(path)
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise RegistryLoadError(f"cannot read breed registry {self.path}: {e}") from e
        if not isinstance(data, dict) or not data.get("breeds"):
            raise RegistryLoadError(f"breed registry {self.path} has no breeds")

        # hash the canonical JSON for auditing
        canon = json.dumps(data, sort_keys=True)
        h = hashlib.sha256(canon.encode()).hexdigest()[:12]
        self.ref = RegistryRef(registry_id=data.get("registry_id", self.path.stem),
                               version=str(data.get("version", "unknown")),
                               hash=h)

        try:
            self.profiles: Tuple[BreedHealthProfile, ...] = tuple(
                BreedHealthProfile.model_validate(b) for b in data["breeds"]
            )
        except Exception as e:
            raise RegistryLoadError(f"breed registry {self.path} failed validation: {e}") from e

        self._by_name: Dict[str, BreedHealthProfile] = {}
        for p in self.profiles:
            for key in (p.breed, *p.aliases):
                # first declaration wins for aliases shared by two breeds
                self._by_name.setdefault(key.strip().lower(), p)

        default_name = str(data.get("default_breed", "Domestic Shorthair")).lower()
        if default_name not in self._by_name:
            raise RegistryLoadError(f"default breed {default_name!r} is not in the registry")
        self.default = self._by_name[default_name]
        logger.debug("loaded %d breed profiles (%s@%s #%s)",
                     len(self.profiles), self.ref.registry_id, self.ref.version, self.ref.hash)

    def lookup(self, breed_name: Optional[str]) -> BreedHealthProfile:
        if not breed_name or not breed_name.strip():
            return self.default
        return self._by_name.get(breed_name.strip().lower(), self.default)


@lru_cache(maxsize=1)
def get_repo() -> BreedRepo:
    return BreedRepo()


# ---------------------------
# Query functions
# ---------------------------
def find_breed_profile(breed_name: Optional[str]) -> BreedHealthProfile:
    """Case-insensitive match on breed name or alias. Unknown, empty or None
    input resolves to the Domestic Shorthair profile."""
    return get_repo().lookup(breed_name)


def default_breed_profile() -> BreedHealthProfile:
    return get_repo().default


def is_default_profile(profile: BreedHealthProfile) -> bool:
    return profile.breed == get_repo().default.breed


def get_health_risks_for_age(profile: BreedHealthProfile, age_years: float) -> List[HealthRisk]:
    # already present or emerging within the next two years
    return [r for r in profile.health_risks if r.typical_onset_years <= age_years + 2]


def get_screenings_for_age(profile: BreedHealthProfile, age_years: float) -> Optional[ScreeningSchedule]:
    """Most recent screening milestone at or before this age."""
    past = [s for s in profile.screening_schedule if s.age_years <= age_years]
    return max(past, key=lambda s: s.age_years) if past else None


def get_upcoming_screenings(profile: BreedHealthProfile, age_years: float) -> Optional[ScreeningSchedule]:
    upcoming = [s for s in profile.screening_schedule if s.age_years > age_years]
    return min(upcoming, key=lambda s: s.age_years) if upcoming else None


def get_age_specific_advice(profile: BreedHealthProfile, age_years: float) -> Optional[AgeSpecificAdvice]:
    # no clamping: ages past the last band have no advice
    return next((a for a in profile.age_specific_advice if a.contains(age_years)), None)


def get_breed_alerts_for_age(profile: BreedHealthProfile, age_years: float) -> Dict[str, List[str]]:
    """Things to watch for in a single year: onset alerts, due screenings and advice."""
    alerts: List[str] = []
    for risk in profile.health_risks:
        if risk.typical_onset_years == age_years:
            alerts.append(f"{profile.breed}s typically begin showing {risk.condition} "
                          f"around age {_fmt_years(age_years)}. {risk.monitoring_advice}")
        elif risk.typical_onset_years == age_years + 1:
            alerts.append(f"Watch for early signs of {risk.condition} - common in {profile.breed}s "
                          f"starting around age {_fmt_years(risk.typical_onset_years)}.")

    screenings: List[str] = []
    due = next((s for s in profile.screening_schedule if s.age_years == age_years), None)
    if due:
        screenings = [f"Recommended: {s} - {due.reason}" for s in due.screenings]

    band = get_age_specific_advice(profile, age_years)
    advice = list(band.advice) if band else []
    return {"alerts": alerts, "screenings": screenings, "advice": advice}


def list_breed_names() -> List[str]:
    return [p.breed for p in get_repo().profiles]


def registry_fingerprint() -> RegistryRef:
    return get_repo().ref


def to_summary(profile: BreedHealthProfile) -> BreedProfileSummary:
    return BreedProfileSummary(
        breed=profile.breed,
        size_category=profile.size_category,
        life_expectancy=profile.life_expectancy.model_dump(),
        ideal_weight=profile.ideal_weight.model_dump(),
        general_notes=profile.general_notes,
    )


def _fmt_years(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
