"""Logging configuration for the jobtracker package.

Every module in the package asks for its logger through ``setup_logging``
so that formatting and levels stay consistent between the tracking
features, the persistence layer and the API.

Example:
    ```python
    from jobtracker.core.logging import setup_logging

    logger = setup_logging('tracking_reminders')
    logger.info('Reminder added')
    ```
"""
import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _configured_level() -> int:
    """Resolve the log level from the ``LOG_LEVEL`` environment variable."""
    level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(logger_name: str) -> logging.Logger:
    """Set up standardized logging configuration.

    If the logger already has handlers, it will not be reconfigured.

    Args:
        logger_name: The name for the logger, typically the module name

    Returns:
        A configured logger instance
    """
    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        level = _configured_level()
        logger.setLevel(level)

        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger

# Make sure the root logger has a handler to avoid "no handler found" warnings
logging.getLogger().addHandler(logging.NullHandler())
