"""
Application configuration using Pydantic Settings.
Loads from environment variables / .env file.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # App
    APP_NAME: str = "PlantCare API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # Storage: "json" (local snapshot file) or "mongo"
    STORAGE_BACKEND: str = "json"
    DATA_FILE: str = "data/plantcare.json"
    
    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "plantcare"
    MONGO_SNAPSHOT_COLLECTION: str = "snapshots"
    
    # OpenAI
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    
    # Scheduling
    TIMEZONE: str = "UTC"  # Calendar-day boundaries for due dates
    EARLY_WARNING_DAYS: int = 2
    
    # Daily reminder time (local to TIMEZONE)
    REMINDER_HOUR: int = 9
    REMINDER_MINUTE: int = 30
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"



@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
