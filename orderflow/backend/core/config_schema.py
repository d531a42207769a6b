"""
Schemas for config/settings/*.yaml.

One top-level model per file, named after it (application.yaml ->
ApplicationSchema). Unknown keys are rejected so a typo in a YAML file
fails at startup.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _StrictBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


# application.yaml


class ServerSchema(_StrictBase):
    host: str
    port: int = Field(ge=1, le=65535)


class CorsSchema(_StrictBase):
    origins: list[str]


class PaginationSchema(_StrictBase):
    default_limit: int = Field(ge=1)
    max_limit: int = Field(ge=1)

    @model_validator(mode="after")
    def _default_within_max(self) -> "PaginationSchema":
        if self.default_limit > self.max_limit:
            raise ValueError("default_limit must not exceed max_limit")
        return self


class TimeoutsSchema(_StrictBase):
    database: int
    external_api: int


class TelegramAppSchema(_StrictBase):
    webhook_path: str = Field(pattern=r"^/")
    public_url: str


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    server: ServerSchema
    cors: CorsSchema
    pagination: PaginationSchema
    timeouts: TimeoutsSchema
    telegram: TelegramAppSchema


# database.yaml


class DatabaseSchema(_StrictBase):
    driver: str
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool


# logging.yaml


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    format: Literal["json", "console"]
    handlers: HandlersSchema


# features.yaml


class FeaturesSchema(_StrictBase):
    auth_require_api_authentication: bool
    api_detailed_errors: bool
    api_request_logging: bool
    channel_telegram_enabled: bool
    # Off: any status change is accepted, the flow only drives forwarding.
    order_flow_enforce_transitions: bool
    order_flow_notifications_enabled: bool


# security.yaml


class JwtSchema(_StrictBase):
    algorithm: str
    access_token_expire_minutes: int
    audience: str


class SecretsValidationSchema(_StrictBase):
    jwt_secret_min_length: int
    webhook_secret_min_length: int


class SecuritySchema(_StrictBase):
    jwt: JwtSchema
    admin_roles: list[str]
    secrets_validation: SecretsValidationSchema


# observability.yaml


class HealthChecksSchema(_StrictBase):
    ready_timeout_seconds: int


class ObservabilitySchema(_StrictBase):
    health_checks: HealthChecksSchema


# order_flow.yaml


class OrderFlowSchema(_StrictBase):
    """
    Vocabulary of the flow editor and the Telegram buttons.

    user_role_map turns an account role (client, shop_owner, ...) into the
    flow role checked against a step's authorizedRoles.
    """

    roles: list[str] = Field(min_length=1)
    common_statuses: list[str]
    status_buttons: dict[str, str]
    user_role_map: dict[str, str]
    suggestion_limit: int = Field(ge=1)

    @model_validator(mode="after")
    def _mapped_roles_exist(self) -> "OrderFlowSchema":
        unknown = sorted(set(self.user_role_map.values()) - set(self.roles))
        if unknown:
            raise ValueError(f"user_role_map names unknown flow roles: {', '.join(unknown)}")
        return self
