"""Environment configuration module.

This module loads the .env file and exposes the settings used throughout the
project, both by library callers and by the maintenance scripts.

Usage:
    from ventry.config.environment import DATABASE_PATH

Note:
    This module handles loading of environment variables via python-dotenv.
    Values already present in the process environment take precedence over
    the .env file.
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables - this must happen before any other imports
load_dotenv()

PROJECT_ROOT = Path(__file__).parent.parent.parent

DATABASE_PATH = Path(
    os.environ.get('VENTRY_DATABASE_PATH', PROJECT_ROOT / 'data' / 'ventry.db')
)
SQL_ECHO = os.environ.get('VENTRY_SQL_ECHO', 'false').strip().lower() in ('1', 'true', 'yes')

_log_level_setting = os.environ.get('VENTRY_LOG_LEVEL', 'INFO').strip().upper()
if not isinstance(logging.getLevelName(_log_level_setting), int):
    logging.warning(
        f"Log level setting '{_log_level_setting}' is invalid. "
        "Expected one of DEBUG, INFO, WARNING, ERROR. Defaulting to INFO."
    )
    _log_level_setting = 'INFO'
LOG_LEVEL = _log_level_setting

__all__ = ['PROJECT_ROOT', 'DATABASE_PATH', 'SQL_ECHO', 'LOG_LEVEL']
