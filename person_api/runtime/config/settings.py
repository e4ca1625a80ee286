from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from person_api.core.exceptions import ConfigurationError


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Required connection settings
    db_path: str
    db_user: str
    db_pass: str
    api_serv_addr: str

    # Environment and deployment
    environment: Literal["development", "production", "test"] = Field(
        default="development", validation_alias="APP_ENVIRONMENT"
    )
    log_level: str | None = Field(default=None)
    config_file: str = Field(default="config.yaml")


def load_environment() -> EnvironmentVariables:
    """Read the environment, failing on the first required variable that is unset."""
    try:
        return EnvironmentVariables()
    except ValidationError as e:
        for error in e.errors():
            if error["type"] == "missing":
                name = str(error["loc"][0]).upper()
                raise ConfigurationError(f"please specify env {name}") from e
        raise ConfigurationError(f"invalid environment: {e}") from e
