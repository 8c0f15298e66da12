"""Application configuration settings.

This module defines the application-wide settings using Pydantic's BaseSettings.
It allows for loading configurations from environment variables and .env files,
providing type validation and default values.
"""

import logging

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings

from reportdeck.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default list of CORS allowed origins
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8000",
    "https://localhost:3000",
    "https://localhost:8000",
    "http://0.0.0.0:8000",
]


class Settings(BaseSettings):
    """Manages application settings, loading them from environment variables or an .env file.

    Attributes:
        gemini_api_key: Credential for the generation backend.
        gamma_api_key: Credential for the presentation export backend.
        api_key: Shared secret protecting the internal API endpoints.
        draft_model_id: Deep-reasoning model used for report drafts.
        fast_model_id: Fast model used for the follow-up suggestions.
        image_model_id: Model used to render the cover image.
        draft_thinking_budget: Deliberation budget requested for every draft.
        gamma_base_url: Base URL of the export backend public API.
        cors_proxy_url: Prefix of the CORS-bridging intermediary; empty disables it.
        proxy_activation_marker: Body marker the intermediary sends when it needs activation.
        catalog_page_size: Page size used when listing export themes.
        catalog_max_pages: Upper bound on pages fetched for a single listing.
        export_poll_interval: Seconds between two status polls of an export job.
        export_max_attempts: Number of polls before an export job is abandoned.
        max_file_size: Maximum size in bytes of one uploaded file.
        max_files: Maximum number of files attached to one request.
        max_total_size: Maximum size in bytes of all files in one request.
        cors_allowed_origins: List of allowed origins for CORS.
        max_sessions: Report sessions kept in memory; the least recently used is evicted.
        log_level: Level of the reportdeck application loggers.
    """

    gemini_api_key: str | None = Field(default=None)
    gamma_api_key: str | None = Field(default=None)
    api_key: str | None = Field(default=None)

    draft_model_id: str = Field(default="gemini-2.5-pro")
    fast_model_id: str = Field(default="gemini-2.5-flash")
    image_model_id: str = Field(default="gemini-2.5-flash-image")
    draft_thinking_budget: int = Field(default=32768)

    gamma_base_url: str = Field(default="https://public-api.gamma.app/v1.0")
    cors_proxy_url: str = Field(default="https://cors-anywhere.herokuapp.com/")
    proxy_activation_marker: str = Field(default="corsdemo")

    catalog_page_size: int = Field(default=50)
    catalog_max_pages: int = Field(default=100)
    export_poll_interval: float = Field(default=5.0, description="Seconds between export status polls.")
    export_max_attempts: int = Field(default=30, description="Polls before an export is reported as timed out.")
    export_connect_timeout: float = Field(default=10.0, description="Export client connect timeout in seconds.")
    export_read_timeout: float = Field(default=60.0, description="Export client read timeout in seconds.")

    max_file_size: int = Field(default=25 * 1024 * 1024)
    max_files: int = Field(default=20)
    max_total_size: int = Field(default=100 * 1024 * 1024)

    cors_allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
    )
    max_sessions: int = Field(default=256)
    log_level: str = Field(default="DEBUG")

    model_config = {
        "env_file": ".env",
        "protected_namespaces": ("settings_",),
        "env_prefix": "",
        "extra": "ignore",
    }

    @field_validator("cors_allowed_origins", mode="before")  # type: ignore
    @classmethod
    def assemble_cors_origins(cls, v: str | list[str] | None) -> list[str]:
        """Assembles the list of CORS allowed origins.

        If 'v' is a string, it splits it by commas. If 'v' is already a list,
        it's used directly. Otherwise, returns the default list of origins.
        """
        if isinstance(v, str) and v:
            return [origin.strip() for origin in v.split(",")]
        elif isinstance(v, list):
            return v
        return list(DEFAULT_CORS_ORIGINS)

    @property
    def proxy_activation_url(self) -> str:
        """Page where the CORS intermediary can be activated by hand."""
        if not self.cors_proxy_url:
            return ""
        return self.cors_proxy_url.rstrip("/") + "/corsdemo"

    def require(self, field_name: str) -> str:
        """Return a credential, raising ConfigurationError if it is not configured."""
        value = getattr(self, field_name)
        if not value:
            raise ConfigurationError(f"{field_name.upper()} is not configured.")
        return value


def report_missing_credentials(cfg: Settings) -> list[str]:
    """Logs every missing credential and returns their names.

    Missing credentials never stop the application from starting; the
    operations depending on them fail individually with ConfigurationError.
    """
    missing = [name for name in ("gemini_api_key", "gamma_api_key", "api_key") if not getattr(cfg, name)]
    for name in missing:
        logger.warning("%s environment variable not set. Related functionality will be unavailable.", name.upper())
    return missing


settings = Settings()
