# breed_models.py
from typing import Literal, Tuple
from pydantic import BaseModel, ConfigDict, Field

SizeCategory = Literal["small", "medium", "large"]
RiskLevel = Literal["low", "moderate", "high"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Range(_Frozen):
    min: float
    max: float


class HealthRisk(_Frozen):
    condition: str
    risk_level: RiskLevel
    typical_onset_years: float = Field(ge=0)
    monitoring_advice: str
    symptoms: Tuple[str, ...] = ()


class ScreeningSchedule(_Frozen):
    age_years: float = Field(ge=0)
    screenings: Tuple[str, ...]
    reason: str


class AgeSpecificAdvice(_Frozen):
    age_range: Tuple[float, float]  # [min_years, max_years)
    focus: str
    advice: Tuple[str, ...]

    def contains(self, age_years: float) -> bool:
        low, high = self.age_range
        return low <= age_years < high


class BreedHealthProfile(_Frozen):
    breed: str
    aliases: Tuple[str, ...] = ()
    size_category: SizeCategory
    life_expectancy: Range
    ideal_weight: Range  # kg
    health_risks: Tuple[HealthRisk, ...] = ()
    screening_schedule: Tuple[ScreeningSchedule, ...] = ()
    age_specific_advice: Tuple[AgeSpecificAdvice, ...] = ()
    general_notes: str = ""


class RegistryRef(_Frozen):
    registry_id: str
    version: str
    hash: str
