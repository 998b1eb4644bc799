"""Notification models and schemas."""

from pydantic import BaseModel, Field


class DailyReminder(BaseModel):
    """A repeating local reminder fired once a day."""
    identifier: str = "daily-plant-care-reminder"
    title: str
    body: str
    badge: int = Field(0, ge=0)
    hour: int = Field(9, ge=0, le=23)
    minute: int = Field(30, ge=0, le=59)
