"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./academy_cms.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    # Required at start-up; the container refuses to build without it.
    secret_key: Optional[SecretStr] = None
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    reset_token_expire_minutes: int = Field(default=10, ge=1)
    # Minimum latency of a forgot-password reply, known and unknown addresses alike.
    reset_response_floor_seconds: float = Field(default=2.0, ge=0)
    # Extra role names accepted by the authorization gate next to the
    # canonical roles, e.g. a legacy "admin" alias. Never persisted.
    extra_allowed_roles: list[str] = Field(default_factory=list)


class MailSettings(BaseModel):
    backend: Literal["smtp", "logging"] = "logging"
    host: str = "localhost"
    port: int = 587
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    use_tls: bool = True
    timeout: float = 10.0
    sender: str = "no-reply@example.com"


class FrontendSettings(BaseModel):
    base_url: str = "http://localhost:3000"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Academy CMS Server"
    api_prefix: str = "/api"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    mail: MailSettings = MailSettings()
    frontend: FrontendSettings = FrontendSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes

    @property
    def reset_token_expire_minutes(self) -> int:
        return self.security.reset_token_expire_minutes


@lru_cache()
def get_settings() -> Settings:
    return Settings()
