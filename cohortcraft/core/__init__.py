"""
Core utilities and configuration for the cohortcraft package.
"""

from cohortcraft.core.config import get_config, get_config_value, set_config_value
from cohortcraft.core.credentials import get_api_key
from cohortcraft.core.logging_config import get_logger, configure_logging
from cohortcraft.core.error_handler import (
    APIError,
    ValidationError,
    ConfigurationError,
    AuthorizationError,
    StoreError,
    RecordNotFoundError,
    LLMParsingError
)
