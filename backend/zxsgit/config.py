"""Application configuration using Pydantic settings."""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Remote store (the JSON-file REST service)
    api_url: str = "http://localhost:4000"
    remote_timeout_seconds: float = 5.0

    # REST service
    api_host: str = "0.0.0.0"
    api_port: int = 4000
    environment: str = "development"
    # Overrides the environment default (DEBUG in development, INFO otherwise)
    log_level: Optional[str] = None
    data_dir: str = "data"
    max_body_bytes: int = 50 * 1024 * 1024

    # CORS
    allowed_origins: str = "*"

    # Local store (browser-style key-value cache)
    local_store_path: Optional[str] = ".zxs/local-storage.json"
    local_store_quota_bytes: int = 5 * 1024 * 1024

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
