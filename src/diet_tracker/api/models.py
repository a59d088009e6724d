"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict, Field


class RecognizeFoodRequest(BaseModel):
    """Free-text food recognition request."""

    model_config = ConfigDict(populate_by_name=True)

    food_description: str | None = Field(default=None, alias="foodDescription")


class RecognizeImageRequest(BaseModel):
    """Image recognition request with a data URL or base64 image."""

    model_config = ConfigDict(populate_by_name=True)

    image_data: str | None = Field(default=None, alias="imageData")


class BodyProfilePayload(BaseModel):
    """Body metrics payload."""

    model_config = ConfigDict(populate_by_name=True)

    height: float | None = None
    weight: float | None = None
    age: int | None = None
    gender: str | None = None
    activity_level: str | None = Field(default=None, alias="activityLevel")


class MealPayload(BaseModel):
    """Logged meal totals."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class TargetsRequest(BaseModel):
    """Daily targets request."""

    profile: BodyProfilePayload
    meals: list[MealPayload] = Field(default_factory=list)


class ChatMessagePayload(BaseModel):
    """Earlier message in a coaching conversation."""

    sender: str
    message: str


class CoachRequest(TargetsRequest):
    """Coaching question with the user's profile, meals and recent chat."""

    message: str | None = None
    history: list[ChatMessagePayload] = Field(default_factory=list)


class DietPlanRequest(TargetsRequest):
    """Diet plan request for a goal such as lose, maintain or gain."""

    goal: str = "maintain"
