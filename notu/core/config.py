"""
Configuration Management.

Loads overrides from the environment (and the optional config/.env) and
settings from config/settings/*.yaml.

Environment overrides (.env or process environment):
    NOTU_API_URL, NOTU_SYNC_ENABLED, NOTU_STORAGE_DIR

Settings (YAML):
    application.yaml   - App identity, remote API, sync, storage, language
    logging.yaml       - Logging configuration
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from notu.core.config_schema import ApplicationSchema, LoggingSchema


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Environment overrides. Anything unset falls back to application.yaml."""

    api_url: str | None = None
    sync_enabled: bool | None = None
    storage_dir: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="NOTU_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@dataclass(frozen=True)
class ClientConfig:
    """Effective client settings after environment overrides."""

    base_url: str
    timeout: float
    sync_enabled: bool
    storage_dir: Path
    default_language: str


@lru_cache
def get_settings() -> Settings:
    """Get cached overrides instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def resolve_storage_dir(configured: str) -> Path:
    """
    Resolve the storage directory.

    `~` is expanded; relative paths are taken from the project root.
    """
    path = Path(configured).expanduser()
    if path.is_absolute():
        return path
    return find_project_root() / path


def get_client_config() -> ClientConfig:
    """
    Build the effective client configuration.

    Environment overrides win over application.yaml. Setting NOTU_API_URL
    alone is enough to turn sync on.

    Returns:
        ClientConfig with base URL, timeout, sync flag, storage directory
        and default language.
    """
    app = get_app_config().application
    settings = get_settings()

    base_url = settings.api_url or app.api.base_url
    if settings.sync_enabled is not None:
        sync_enabled = settings.sync_enabled
    else:
        sync_enabled = app.sync.enabled or settings.api_url is not None

    return ClientConfig(
        base_url=base_url.rstrip("/"),
        timeout=float(app.api.timeout),
        sync_enabled=sync_enabled,
        storage_dir=resolve_storage_dir(settings.storage_dir or app.storage.directory),
        default_language=app.i18n.default_language,
    )
