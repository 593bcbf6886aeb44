"""
Core settings and environment variables for the Jan Awaaz issue core.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Jan Awaaz Issue Core"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API (comma separated)
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Storage backend: "json" (local file), "firestore" or "memory"
    STORAGE_BACKEND: str = "json"
    DATA_FILE_PATH: str = "./jan_awaaz_db.json"

    # Firebase/Firestore (only read when STORAGE_BACKEND=firestore)
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # Proximity strategy used by duplicate detection and nearby queries.
    # "planar" compares raw degree deltas; "haversine" uses great-circle km.
    DISTANCE_STRATEGY: str = "planar"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    def cors_origins_list(self) -> List[str]:
        return [origin.strip().rstrip("/") for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
