"""Process entry point: load configuration, configure logging, serve the API."""

import uvicorn
from loguru import logger

from person_api.api.http.app import create_app
from person_api.api.utils.app_startup import configure_logging
from person_api.core.exceptions import ConfigurationError
from person_api.runtime.config.config_template import load_config
from person_api.runtime.context import set_config


def main() -> None:
    try:
        config = load_config()
    except ConfigurationError as e:
        logger.critical("{}", e)
        raise SystemExit(1) from e

    set_config(config)
    configure_logging(config)

    uvicorn.run(
        create_app(config),
        host=config.app.host,
        port=config.app.port,
        access_log=False,  # We handle access logging in middleware
    )


if __name__ == "__main__":
    main()
