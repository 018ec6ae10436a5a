"""
Logging setup for cohortcraft.

configure_logging() installs a stderr console handler and a rotating file
handler on the root logger, with level, file and format taken from the
"logging" configuration section. Modules log through get_logger(__name__).
Outgoing provider payloads are logged with secrets masked and long prompts
shortened.
"""

import os
import sys
import logging
import logging.handlers
from typing import Dict, Any, Optional

# Libraries that log every connection or request at INFO
QUIET_LOGGERS = ["urllib3", "werkzeug"]

# Longest string value written when logging a request payload
MAX_LOGGED_VALUE = 200

SENSITIVE_KEYS = [
    "api_key", "apikey", "key", "secret", "password", "token", "auth", "credential",
    "client_id", "client_secret", "access_token", "refresh_token"
]

def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    log_to_console: bool = True,
    log_to_file: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5
) -> None:
    """
    Configure the root logger.

    Args:
        level (str, optional): DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to logging.level.
        log_file (str, optional): Log file path. Defaults to logging.file.
        log_format (str, optional): Record format. Defaults to logging.format.
        log_to_console (bool): Log to stderr
        log_to_file (bool): Log to the rotating file
        max_bytes (int): Size at which the log file is rotated
        backup_count (int): Number of rotated files kept
    """
    from cohortcraft.core.config import get_config_value

    level = level or get_config_value("logging.level", "INFO")
    log_file = log_file or get_config_value("logging.file", "cohortcraft.log")
    log_format = log_format or get_config_value(
        "logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    numeric_level = logging.getLevelName(str(level).upper())
    root_logger.setLevel(numeric_level if isinstance(numeric_level, int) else logging.INFO)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    # stderr keeps CLI output on stdout clean
    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_to_file and log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.
    """
    return logging.getLogger(name)

def log_api_request(logger: logging.Logger, api_name: str, endpoint: str, params: Dict[str, Any]) -> None:
    """
    Log an outgoing provider request.

    The endpoint is logged at INFO, the payload at DEBUG with secrets masked.

    Args:
        logger (logging.Logger): Logger of the calling module
        api_name (str): Provider name
        endpoint (str): Request URL
        params (Dict[str, Any]): JSON payload
    """
    logger.info(f"API Request to {api_name} - {endpoint}")
    for key, value in redact_sensitive_data(params).items():
        if isinstance(value, str) and len(value) > MAX_LOGGED_VALUE:
            value = f"{value[:MAX_LOGGED_VALUE]}... ({len(value)} chars)"
        logger.debug(f"  {key}: {value}")

def redact_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of data with the values of secret-looking keys masked.

    Nested dictionaries are redacted too.
    """
    redacted = dict(data)

    for key, value in redacted.items():
        if any(sensitive_key in key.lower() for sensitive_key in SENSITIVE_KEYS):
            redacted[key] = "********"
        elif isinstance(value, dict):
            redacted[key] = redact_sensitive_data(value)

    return redacted
