from pydantic import BaseModel


class WeightSettings(BaseModel):
    # strings as stored; blank or null clears the override
    recencydaysweight: str | None = None
    slotcountweight: str | None = None
    activitycountweight: str | None = None
    completionweight: str | None = None


class EffectiveWeights(BaseModel):
    recency_weight: float
    slot_weight: float
    activity_weight: float
    completion_weight: float


class WeightSettingsRead(BaseModel):
    stored: WeightSettings
    effective: EffectiveWeights


class LifecycleRunRead(BaseModel):
    course_id: int
    actions: list[dict]
