"""
Application configuration and environment variables
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables"""

    # Storage
    STORAGE_BACKEND: str = os.getenv("HABIT_STORAGE_BACKEND", "json")  # json/sqlite
    STORAGE_FILE: str = os.getenv("HABIT_STORAGE_FILE", "habit_tracker.json")
    DATABASE_URL: str = os.getenv("HABIT_DATABASE_URL", "sqlite:///habit_tracker.db")

    # Logging
    LOG_LEVEL: str = os.getenv("HABIT_LOG_LEVEL", "INFO")

    # Flask
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-change-this-in-production")


# Create a global settings instance
settings = Settings()
