from pydantic_settings import BaseSettings
from pathlib import Path
from typing import List
import os

class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "Abyss"
    APP_VERSION: str = "1.0.0"

    # Application Settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    # Remote dialogue agent
    AGENT_ENDPOINT_URL: str = "http://localhost:3000/api/agent"
    AGENT_ID: str = "6921973e23b88b385103d189"
    AGENT_REQUEST_TIMEOUT: float = 60.0  # seconds

    # Local key-value store (one JSON file per key)
    DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data" / "store"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Ensure the store directory exists
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)

        # Validate critical settings
        self._validate_settings()

    def _validate_settings(self):
        """Validate critical settings"""
        if not self.AGENT_ID or not self.AGENT_ID.strip():
            raise ValueError("AGENT_ID must be set")

        if self.AGENT_REQUEST_TIMEOUT <= 0:
            raise ValueError("AGENT_REQUEST_TIMEOUT must be positive")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

# Create settings instance
try:
    settings = Settings()
except Exception as e:
    print(f"Configuration error: {e}")
    # Fall back to the built-in agent defaults for development
    settings = Settings(
        AGENT_ID=os.getenv("ABYSS_FALLBACK_AGENT_ID", "6921973e23b88b385103d189"),
        AGENT_REQUEST_TIMEOUT=60.0,
    )
