"""
Configuration for the order flow engine.

Two sources, nothing hardcoded:

- config/.env holds secrets only: DB_PASSWORD, JWT_SECRET,
  TELEGRAM_BOT_TOKEN, TELEGRAM_WEBHOOK_SECRET. Environment variables
  with the same names win over the file.
- config/settings/<section>.yaml holds everything else, one file per
  AppConfig section, each validated by its schema in config_schema.py.
  order_flow.yaml carries the role vocabulary, the client-role mapping
  and the Telegram button labels.

Paths resolve from the directory holding the .project_root marker.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from orderflow.backend.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    FeaturesSchema,
    LoggingSchema,
    ObservabilitySchema,
    OrderFlowSchema,
    SecuritySchema,
)

ROOT_MARKER = ".project_root"


def find_project_root() -> Path:
    """Nearest ancestor of the working directory containing .project_root."""
    cwd = Path.cwd()
    for candidate in (cwd, *cwd.parents):
        if (candidate / ROOT_MARKER).exists():
            return candidate
    raise RuntimeError(f"Project root not found. Ensure {ROOT_MARKER} file exists.")


def validate_project_root() -> Path:
    """find_project_root() for entry scripts: exits with a message instead of raising."""
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    path = find_project_root() / "config" / "settings" / filename
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets. jwt_secret is the only one every process needs."""

    db_password: str = ""
    jwt_secret: str
    telegram_bot_token: str = ""
    telegram_webhook_secret: str = ""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type[BaseModel], filename: str) -> Any:
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


# Section name -> schema; each section is read from <name>.yaml.
SECTIONS: dict[str, type[BaseModel]] = {
    "application": ApplicationSchema,
    "database": DatabaseSchema,
    "logging": LoggingSchema,
    "features": FeaturesSchema,
    "security": SecuritySchema,
    "observability": ObservabilitySchema,
    "order_flow": OrderFlowSchema,
}


class AppConfig:
    """
    Every YAML section, validated on construction.

    A missing key, a wrong type or an unknown field fails here with the
    file name in the message, not later as a KeyError deep in a request.
    """

    application: ApplicationSchema
    database: DatabaseSchema
    logging: LoggingSchema
    features: FeaturesSchema
    security: SecuritySchema
    observability: ObservabilitySchema
    order_flow: OrderFlowSchema

    def __init__(self) -> None:
        for section, schema_cls in SECTIONS.items():
            setattr(self, section, _load_validated(schema_cls, f"{section}.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_database_url() -> str:
    """SQLAlchemy URL; SQLite drivers treat `name` as the database file."""
    db = get_app_config().database
    if db.driver.startswith("sqlite"):
        return f"{db.driver}:///{db.name}"
    return f"{db.driver}://{db.user}:{get_settings().db_password}@{db.host}:{db.port}/{db.name}"


def get_server_base_url() -> tuple[str, float]:
    """(base_url, timeout_seconds) the admin CLI uses to reach the API."""
    application = get_app_config().application
    return (
        f"http://{application.server.host}:{application.server.port}",
        float(application.timeouts.external_api),
    )
