"""
Configuration for the cohortcraft package.

Settings are layered, later layers winning:
1. Packaged defaults (cohortcraft/core/default_config.json)
2. The user file (~/.cohortcraft/config.json, or $COHORTCRAFT_CONFIG), deep merged
3. COHORTCRAFT_* environment variables listed in ENV_OVERRIDES, for deployments
   that run the HTTP server without a config file
4. Runtime changes made with set_config_value()

API keys are not configuration. They come from the environment
(see cohortcraft.core.credentials).
"""

import os
import json
from typing import Dict, Any, List, Tuple

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "default_config.json")
USER_CONFIG_PATH = os.path.expanduser(
    os.environ.get("COHORTCRAFT_CONFIG", "~/.cohortcraft/config.json")
)

# Environment variable -> dotted config key
ENV_OVERRIDES = {
    "COHORTCRAFT_LLM_MODEL": "llm.model",
    "COHORTCRAFT_IMAGE_PROVIDER": "image.provider",
    "COHORTCRAFT_STORAGE_BACKEND": "storage.backend",
    "COHORTCRAFT_STORAGE_PATH": "storage.path",
    "COHORTCRAFT_API_TOKEN": "server.api_token",
    "COHORTCRAFT_LOG_LEVEL": "logging.level",
}

_config_cache: Dict[str, Any] = {}

def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    Get the merged configuration, loading it on first use.

    Args:
        reload (bool): Discard the cached configuration and runtime changes

    Returns:
        Dict[str, Any]: The configuration dictionary
    """
    global _config_cache

    if not _config_cache or reload:
        _config_cache = load_config()

    return _config_cache

def load_config() -> Dict[str, Any]:
    """
    Build the configuration from the packaged defaults, the user file and the environment.

    Returns:
        Dict[str, Any]: The merged configuration dictionary
    """
    config: Dict[str, Any] = {}

    for path in (DEFAULT_CONFIG_PATH, USER_CONFIG_PATH):
        if os.path.exists(path):
            with open(path, 'r') as f:
                deep_merge(config, json.load(f))

    for env_var, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            parent, leaf = _split_key(config, key, create=True)
            parent[leaf] = value

    return config

def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """
    Merge override into base in place.

    Nested dictionaries are merged key by key; any other value in override
    replaces the one in base.
    """
    for key, value in override.items():
        if isinstance(base.get(key), dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value

def save_user_config(config: Dict[str, Any]) -> None:
    """
    Write a configuration to the user config file and reload.

    Args:
        config (Dict[str, Any]): Configuration to save
    """
    os.makedirs(os.path.dirname(USER_CONFIG_PATH), exist_ok=True)

    with open(USER_CONFIG_PATH, 'w') as f:
        json.dump(config, f, indent=2)

    get_config(reload=True)

def _split_key(config: Dict[str, Any], key: str, create: bool = False) -> Tuple[Any, str]:
    """
    Walk a dotted key down to the dictionary holding its last part.

    Returns:
        (parent, leaf) where parent is None if a level is missing and create is False
    """
    parts: List[str] = key.split('.')
    current: Any = config

    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            if not create:
                return None, parts[-1]
            current[part] = {}
        current = current[part]

    return current, parts[-1]

def get_config_value(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by dotted key.

    Examples:
        >>> get_config_value('image.provider')
        'runware'
        >>> get_config_value('image.nonexistent', 512)
        512

    Args:
        key (str): Key such as 'llm.model'
        default (Any): Returned when the key is not set

    Returns:
        Any: The configuration value or default
    """
    parent, leaf = _split_key(get_config(), key)
    if parent is None:
        return default
    return parent.get(leaf, default)

def set_config_value(key: str, value: Any, save: bool = True) -> None:
    """
    Set a configuration value by dotted key.

    Examples:
        >>> set_config_value('image.provider', 'replicate')
        >>> set_config_value('storage.backend', 'memory', save=False)

    Args:
        key (str): Key such as 'image.provider'. Missing levels are created.
        value (Any): The value to set
        save (bool): Also write the configuration to the user config file
    """
    config = get_config()
    parent, leaf = _split_key(config, key, create=True)
    parent[leaf] = value

    if save:
        save_user_config(config)
