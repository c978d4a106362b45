"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    port: int = 8000
    python_env: str = "development"
    allowed_origins: str = "http://localhost:3000"
    request_timeout_seconds: int = 30

    # Background computation
    offload_threshold: int = 500
    debounce_ms: int = 100
    worker_timeout_seconds: float = 30.0
    background_enabled: bool = True

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()
