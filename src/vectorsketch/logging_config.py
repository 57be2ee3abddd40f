"""
Logging Configuration
Sets up the package logger shared by the geometry engine and the editor store.
"""
import logging
import sys
from typing import Optional, Union

LOGGER_NAMESPACE = "vectorsketch"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configures the logger for the 'vectorsketch' namespace.

    Args:
        level: Logging level, either numeric (logging.DEBUG) or by name ("DEBUG").
        log_file: Optional path to save logs to a file.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level '{name}'")

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)

    # Re-running setup must not stack handlers
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized (level=%s, file=%s).", logging.getLevelName(level), log_file)
    return logger
