"""
Row persistence for brand guidelines, campaigns, micro-cohorts and creatives.

This module provides the RowStore interface, its implementations and a factory
that picks one from configuration.
"""

from typing import Optional

from cohortcraft.store.base import RowStore, validate_row
from cohortcraft.store.memory_store import MemoryStore, JsonFileStore
from cohortcraft.store.supabase_store import SupabaseStore
from cohortcraft.core.config import get_config_value
from cohortcraft.core.constants import DEFAULT_STORAGE_BACKEND, DEFAULT_STORE_PATH
from cohortcraft.core.error_handler import ConfigurationError

def get_store(backend: Optional[str] = None) -> RowStore:
    """
    Create the row store named by the storage configuration.

    Args:
        backend (str, optional): "json", "memory" or "supabase". Defaults to storage.backend.

    Returns:
        RowStore: A store instance

    Raises:
        ConfigurationError: If the backend name is unknown
    """
    backend = (backend or get_config_value("storage.backend", DEFAULT_STORAGE_BACKEND)).lower()

    if backend == "json":
        return JsonFileStore(get_config_value("storage.path", DEFAULT_STORE_PATH))
    if backend == "memory":
        return MemoryStore()
    if backend == "supabase":
        return SupabaseStore()

    raise ConfigurationError(f"Unknown storage backend: {backend}", component="storage")
