from __future__ import annotations
from typing import List, Optional, Literal
from pydantic import BaseModel, Field

# ---------- Core domain ----------

Sex = Literal["male", "female", "unknown"]
BodyCondition = Literal["underweight", "ideal", "overweight", "unknown"]
IndoorOutdoor = Literal["indoor", "outdoor", "mixed"]
WeightSource = Literal["user_estimate", "vet_recent", "unknown"]

FoodType = Literal["dry", "wet", "mixed", "raw", "other"]
FeedingFrequency = Literal[1, 2, 3, 4]  # times per day
LitterCleaningFrequency = Literal["daily", "every_2_days", "weekly", "unknown"]

# used when the intake never captured an age
DEFAULT_AGE_YEARS = 1


class CatProfile(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    age_years: Optional[int] = Field(None, ge=0)
    age_months: Optional[int] = Field(None, ge=0, le=11)
    sex: Optional[Sex] = None
    neutered: Optional[bool] = None
    breed: Optional[str] = None
    indoor_outdoor: Optional[IndoorOutdoor] = None
    weight_kg: Optional[float] = Field(None, gt=0)
    weight_source: Optional[WeightSource] = None
    body_condition: Optional[BodyCondition] = None
    known_conditions: List[str] = Field(default_factory=list)
    photo_url: Optional[str] = None
    avatar_url: Optional[str] = None

    def display_name(self) -> str:
        return self.name or "Your cat"

    def total_age_months(self) -> int:
        years = self.age_years if self.age_years is not None else DEFAULT_AGE_YEARS
        return years * 12 + (self.age_months or 0)


class CareRoutine(BaseModel):
    food_type: Optional[FoodType] = None
    food_amount_oz_per_day: Optional[float] = Field(None, ge=0)
    feeding_frequency: Optional[FeedingFrequency] = None
    treats_per_day: Optional[float] = Field(None, ge=0)
    play_minutes_per_day: Optional[float] = Field(None, ge=0)
    vet_visits_per_year: Optional[float] = Field(None, ge=0)
    litter_cleaning_frequency: Optional[LitterCleaningFrequency] = None


class PhotoAnalysis(BaseModel):
    photo_body_condition: BodyCondition = "unknown"
    photo_comment: str = ""
    photo_confidence: float = Field(0.0, ge=0, le=1)
    estimated_color: Optional[str] = None
    estimated_pattern: Optional[str] = None
    mismatch_detected: bool = False
    mismatch_message: Optional[str] = None
