"""Logging setup for the command-line entry points.

Library modules only create module-level loggers; handlers are installed here
so that importing ``book_lending`` never reconfigures the host application.
"""

import logging
import sys

from .config import LendingConfig, get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: LendingConfig | None = None) -> None:
    """Send log records to stderr at the configured level."""
    config = config or get_config()
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    # SQL echo goes through the engine logger rather than create_engine(echo=...)
    if config.echo_sql:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    else:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
