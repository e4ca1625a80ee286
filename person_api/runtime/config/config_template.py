"""Configuration template substitution and loading."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from person_api.core.exceptions import ConfigurationError
from person_api.runtime.config.config_data import ConfigData
from person_api.runtime.config.settings import EnvironmentVariables, load_environment


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message

    An empty variable counts as missing.
    """
    def replacer(match):
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name) or default

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if not value:
                raise ConfigurationError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = os.getenv(var_expr)
        if not value:
            raise ConfigurationError(f"Required environment variable {var_expr} not set")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_templated_yaml(file_path: Path) -> dict[str, Any]:
    """
    Load the ``config`` section of a YAML file with environment variable substitution.

    A missing file yields an empty mapping so every setting keeps its default.

    Raises:
        ConfigurationError: If the YAML is invalid or a required variable is missing
    """
    if not file_path.exists():
        logger.info("No configuration file at {}, using defaults", file_path)
        return {}

    content = substitute_env_vars(file_path.read_text())

    try:
        loaded = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected a mapping in {file_path}")
    return loaded.get("config") or {}


def load_config(env_vars: EnvironmentVariables | None = None) -> ConfigData:
    """Build the application configuration from config.yaml and the environment.

    The connection settings always come from the environment, overriding
    anything the file says about them. Both sources are validated together,
    so a malformed bind address fails here rather than when the server starts.
    """
    env_vars = env_vars or load_environment()
    raw = load_templated_yaml(Path(env_vars.config_file))

    overrides: dict[str, dict[str, Any]] = {
        "app": {"environment": env_vars.environment, "bind_address": env_vars.api_serv_addr},
        "database": {
            "path": env_vars.db_path,
            "user": env_vars.db_user,
            "password": env_vars.db_pass,
        },
    }
    if env_vars.log_level:
        overrides["logging"] = {"level": env_vars.log_level}
    for section, values in overrides.items():
        raw[section] = {**(raw.get(section) or {}), **values}

    try:
        config = ConfigData.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    logger.info("Loaded configuration for environment: {}", config.app.environment)
    return config
