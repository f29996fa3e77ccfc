"""
Logging setup for the CLI and the Flask server.

Library modules only create module-level loggers; handlers and the level
are configured once, by whichever entry point starts the process.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def setup_logging(level: str = "WARNING"):
    """Configure the root logger; `level` is one of LOG_LEVELS, any case."""
    name = level.upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {LOG_LEVELS}")
    logging.basicConfig(level=getattr(logging, name), format=LOG_FORMAT)
