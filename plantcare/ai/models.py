"""AI collaborator models and schemas.

The model replies in camelCase JSON; fields accept both camelCase and
snake_case names.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Set
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from plantcare.plants.models import CareStep, CareStepType, Direction, HumidityPreference, LightType


class SpacePlacementPreference(str, Enum):
    INDOOR = "Indoor"
    OUTDOOR = "Outdoor"
    NO_PREFERENCE = "No Preference"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AIPlantRecommendation(CamelModel):
    """Care recommendation for a named plant."""
    name: str
    latin_name: Optional[str] = None
    light_type: LightType
    preferred_light_direction: Direction
    humidity_preference: Optional[HumidityPreference] = None
    watering_instructions: str
    watering_frequency_days: int = Field(..., gt=0)
    misting_instructions: Optional[str] = None
    misting_frequency_days: Optional[int] = Field(None, gt=0)
    dusting_instructions: Optional[str] = None
    dusting_frequency_days: Optional[int] = Field(None, gt=0)
    rotation_instructions: Optional[str] = None
    rotation_frequency_days: Optional[int] = Field(None, gt=0)
    general_notes: str = ""
    recommended_spaces: List[str] = Field(default_factory=list)
    recommended_space_types: List[str] = Field(default_factory=list)


class CareSuggestion(CamelModel):
    type: CareStepType
    custom_name: Optional[str] = None
    instructions: Optional[str] = None
    frequency_days: Optional[int] = None


class PlantChangeSuggestion(CamelModel):
    """Changes the AI proposes for an existing plant; unset fields are unchanged."""
    name: Optional[str] = None
    # The model answers with a space *name* here, not an id.
    suggested_space: Optional[str] = Field(None, alias="assignedRoomID")
    light_type: Optional[LightType] = None
    preferred_light_direction: Optional[Direction] = None
    humidity_preference: Optional[HumidityPreference] = None
    general_notes: Optional[str] = None
    care_steps: Optional[List[CareSuggestion]] = None

    def change_keys(self) -> List[str]:
        """Keys of the changes this suggestion carries."""
        keys = []
        if self.name is not None:
            keys.append("name")
        if self.suggested_space is not None:
            keys.append("space")
        if self.light_type is not None:
            keys.append("light_type")
        if self.preferred_light_direction is not None:
            keys.append("light_direction")
        if self.humidity_preference is not None:
            keys.append("humidity")
        if self.general_notes is not None:
            keys.append("notes")
        if self.care_steps:
            keys.append("care_steps")
        return keys


class AIPlantQuestionResponse(CamelModel):
    answer: str
    suggested_changes: Optional[PlantChangeSuggestion] = None


class PlantHealthCheckReply(CamelModel):
    feedback: str


class PlantCareRevision(CamelModel):
    """One field-level change proposed by a care review of all plants."""
    plant_id: str
    plant_name: str = ""
    field: str
    current_value: str = ""
    suggested_value: str
    reason: str = ""


class PlantCareVibeCheckResponse(CamelModel):
    overall: str
    suggestions: List[PlantCareRevision] = Field(default_factory=list)


# ==================== API Schemas ====================


class RecommendationRequest(BaseModel):
    plant_name: str = Field(..., min_length=1)
    preference: SpacePlacementPreference = SpacePlacementPreference.NO_PREFERENCE


class PlantQuestionRequest(BaseModel):
    question: str = Field(..., min_length=1)
    photo_base64: Optional[str] = Field(None, description="Base64 encoded JPEG of the plant")


class ApplySuggestionRequest(BaseModel):
    suggestion: PlantChangeSuggestion
    selected: Optional[Set[str]] = Field(
        None, description="Change keys to apply; all suggested changes when omitted"
    )


class RecommendedPlantResponse(BaseModel):
    """A recommendation turned into an unsaved plant draft."""
    recommendation: AIPlantRecommendation
    care_steps: List[CareStep] = Field(default_factory=list)
    recommended_space_ids: List[UUID] = Field(default_factory=list)


class IdentifyPlantRequest(BaseModel):
    photo_base64: str = Field(..., min_length=1, description="Base64 encoded JPEG of the plant")


class IdentifyPlantResponse(BaseModel):
    """``identified`` is False when the model could not name the plant."""
    name: str
    identified: bool


class HealthCheckRequest(BaseModel):
    photos_base64: List[str] = Field(
        ..., min_length=1, max_length=3, description="Recent base64 encoded JPEGs, newest first"
    )


class HealthCheckResponse(BaseModel):
    plant_id: UUID
    feedback: str
    checked_at: datetime


class ApplyRevisionsRequest(BaseModel):
    revisions: List[PlantCareRevision] = Field(..., min_length=1)
