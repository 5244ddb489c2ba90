from __future__ import annotations
from typing import List, Optional, Literal, Dict
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

#custom imports
from CatLife_Agents.breedRegistry.breed_models import HealthRisk, SizeCategory

# ---------------------------
# Per-month simulation output
# ---------------------------
HealthStatus = Literal["thriving", "ok", "risky", "unhealthy"]
AlertSeverity = Literal["info", "warning", "critical"]

HealthTrend = Literal["improving", "stable", "declining"]
RecommendationCategory = Literal["screening", "diet", "activity", "monitoring", "comfort"]
NotePriority = Literal["high", "medium", "low"]

# thriving > ok > risky > unhealthy
STATUS_SCORES: Dict[str, int] = {"thriving": 4, "ok": 3, "risky": 2, "unhealthy": 1}


def status_from_score(score: float) -> HealthStatus:
    if score >= 3.5:
        return "thriving"
    if score >= 2.5:
        return "ok"
    if score >= 1.5:
        return "risky"
    return "unhealthy"


class SimulationPoint(BaseModel):
    age_months: int = Field(ge=0)
    weight_kg_estimate: float
    health_status: HealthStatus
    notes: str = ""


class SimulationAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    age_months: int
    severity: AlertSeverity
    message: str
    recommendation: str


class SimulationResult(BaseModel):
    points: List[SimulationPoint] = Field(default_factory=list)
    alerts: List[SimulationAlert] = Field(default_factory=list)
    summary: str = ""
    recommendations: List[str] = Field(default_factory=list, max_length=6)


# ---------------------------
# Enhancement layer
# ---------------------------
class HealthTrajectory(BaseModel):
    trend: HealthTrend = "stable"
    projected_status_at_year10: HealthStatus = "ok"
    projected_status_at_year15: HealthStatus = "ok"
    risk_factors: List[str] = Field(default_factory=list)
    positive_factors: List[str] = Field(default_factory=list)
    average_health_score: float = Field(3.0, ge=1, le=4)


class EnhancedMilestoneNote(BaseModel):
    """Personalized note returned by the milestone-note service.

    Accepts both the service's camelCase keys and snake_case.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    age_years: int
    personalized_note: str
    breed_specific_alerts: List[str] = Field(default_factory=list)
    age_appropriate_advice: List[str] = Field(default_factory=list)
    upcoming_milestones: List[str] = Field(default_factory=list)
    trajectory_insight: str = ""
    priority: NotePriority = "medium"


class EnhancedSimulationPoint(SimulationPoint):
    enhanced_note: Optional[EnhancedMilestoneNote] = None
    breed_health_risks: List[HealthRisk] = Field(default_factory=list)


class ProgressiveRecommendation(BaseModel):
    age_years: int
    category: RecommendationCategory
    recommendation: str
    reason: str
    priority: NotePriority


class BreedProfileSummary(BaseModel):
    breed: str
    size_category: SizeCategory
    life_expectancy: Dict[str, float]
    ideal_weight: Dict[str, float]
    general_notes: str


class EnhancedSimulationResult(SimulationResult):
    enhanced_points: List[EnhancedSimulationPoint] = Field(default_factory=list)
    trajectory: HealthTrajectory = Field(default_factory=HealthTrajectory)
    breed_profile: Optional[BreedProfileSummary] = None
    progressive_timeline: List[ProgressiveRecommendation] = Field(default_factory=list)
    is_enhanced: bool = False
