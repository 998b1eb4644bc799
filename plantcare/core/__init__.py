"""Core module - config, database, exceptions."""

from plantcare.core.config import get_settings, Settings
from plantcare.core.database import Database
from plantcare.core.exceptions import (
    AppException,
    NotFoundException,
    BadRequestException,
    RoutineStateError,
    AIServiceError,
    PersistenceError,
)

__all__ = [
    "get_settings",
    "Settings",
    "Database",
    "AppException",
    "NotFoundException",
    "BadRequestException",
    "RoutineStateError",
    "AIServiceError",
    "PersistenceError",
]
