from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass

from person_api.runtime.config.config_data import ConfigData
from person_api.runtime.config.config_template import load_config


@dataclass
class AppContext:
    """Application context containing configuration and other app-wide state."""

    config: ConfigData


# Loaded from the environment on first use, then kept for the process lifetime
_app_context: ContextVar[AppContext | None] = ContextVar("app_context", default=None)


def get_context() -> AppContext:
    """Get the current application context, loading it on first access.

    Raises:
        ConfigurationError: If the environment is incomplete.
    """
    context = _app_context.get()
    if context is None:
        context = AppContext(config=load_config())
        _app_context.set(context)
    return context


def set_context(context: AppContext) -> Token[AppContext | None]:
    """Set the current application context."""
    return _app_context.set(context)


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Context manager for temporarily replacing the application configuration.

    Example:
        with with_context(test_config):
            assert get_config() is test_config
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    token = set_context(AppContext(config=config_override))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the entire current configuration with the provided one."""
    set_context(AppContext(config=config))


def get_config() -> ConfigData:
    """Convenience function to get the current configuration."""
    return get_context().config
