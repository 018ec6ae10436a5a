"""
Credential management for API keys.

This module provides functions for reading API credentials:
- Loading credentials from environment variables (and a .env file if present)
- Failing fast with setup instructions when a required credential is missing

Credentials are never prompted for interactively; the edge handlers run
unattended and must report a missing key as an error.
"""

import os
from typing import Dict, List, Optional

from dotenv import load_dotenv

from cohortcraft.core.error_handler import ConfigurationError
from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()

# Map API names to environment variable names
API_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "runware": "RUNWARE_API_KEY",
    "replicate": "REPLICATE_API_TOKEN",
    "supabase": "SUPABASE_SERVICE_ROLE_KEY",
}

def get_credential(key: str, required: bool = True) -> Optional[str]:
    """
    Get a credential from environment variables.

    Args:
        key (str): Environment variable name
        required (bool): Whether the credential is required

    Returns:
        Optional[str]: The credential value or None if not required and not found

    Raises:
        ConfigurationError: If credential is required but not set
    """
    value = os.environ.get(key)

    if not value:
        if required:
            logger.error(
                f"{key} environment variable is not set. "
                f"Set it in your shell (export {key}=...) or in a .env file."
            )
            raise ConfigurationError(f"Missing {key}", missing_keys=[key])
        return None

    return value

def get_credentials_for_service(service: str, env_vars: List[str]) -> Dict[str, str]:
    """
    Get all required credentials for a service.

    Args:
        service (str): Service name (e.g., 'supabase')
        env_vars (List[str]): List of required environment variable names

    Returns:
        Dict[str, str]: Dictionary of credential key-value pairs

    Raises:
        ConfigurationError: If any required credential is not found
    """
    missing = [var for var in env_vars if not os.environ.get(var)]
    if missing:
        logger.error(f"Missing credentials for {service}: {', '.join(missing)}")
        raise ConfigurationError(
            f"Missing credentials for {service}",
            component=service,
            missing_keys=missing
        )

    return {var: os.environ[var] for var in env_vars}

def get_api_key(api_name: str) -> str:
    """
    Get API key for a specific API.

    Args:
        api_name (str): API name (e.g., 'openai', 'runware', 'replicate')

    Returns:
        str: API key

    Raises:
        ValueError: If the API name is unknown
        ConfigurationError: If the API key is not set
    """
    env_var = API_KEY_ENV_VARS.get(api_name.lower())
    if not env_var:
        raise ValueError(f"Unknown API: {api_name}")

    try:
        return get_credential(env_var, required=True)
    except ConfigurationError:
        raise ConfigurationError(f"Missing {api_name} API key", component=api_name, missing_keys=[env_var]) from None
