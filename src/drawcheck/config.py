"""Configuration management for the application."""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get project root directory
PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_version: str = "v1"

    # Rule sets live in <rules_dir>/<AUTHORITY>.json
    rules_dir: str = "rules"

    # Serve mocked LLM responses instead of calling Azure OpenAI
    dev_mode: bool = False

    # Rule matching
    context_radius: int = 30
    equality_tolerance: float = 1e-6

    # Rule extraction
    extraction_chunk_chars: int = 11000
    extraction_temperature: float = 0.0
    extraction_candidate_max_tokens: int = 2000
    extraction_normalize_max_tokens: int = 1000
    pdf_fetch_timeout_seconds: float = 60.0
    max_upload_mb: int = 30

    # Azure OpenAI
    azure_openai_endpoint: Optional[str] = None
    azure_openai_deployment_name: str = "gpt-4o"
    # Reasoning deployments (e.g. gpt-5.1) reject temperature and max_tokens;
    # they get max_completion_tokens instead
    azure_openai_reasoning_model: bool = False
    azure_openai_api_version: str = "2024-12-01-preview"
    # When set, key auth is used instead of Entra ID
    azure_openai_api_key: Optional[str] = None

    # Azure OpenAI reliability
    azure_openai_max_retries: int = 6
    azure_openai_retry_base_seconds: float = 1.0
    azure_openai_retry_max_seconds: float = 30.0

    @property
    def rules_path(self) -> Path:
        """Get the rule set directory as an absolute path."""
        path = Path(self.rules_dir).expanduser()
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path

    @property
    def max_upload_bytes(self) -> int:
        """Get the upload size limit in bytes."""
        return self.max_upload_mb * 1024 * 1024

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
