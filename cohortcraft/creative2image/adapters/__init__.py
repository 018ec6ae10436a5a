"""
Adapters for image generation services.

This module provides the adapter implementations and a registry that picks one
by provider name.
"""

from typing import Optional

from cohortcraft.creative2image.adapters.base import ImageGenerationAdapter
from cohortcraft.creative2image.adapters.runware import RunwareAdapter
from cohortcraft.creative2image.adapters.openai_images import OpenAIImageAdapter
from cohortcraft.creative2image.adapters.replicate import ReplicateAdapter
from cohortcraft.core.config import get_config_value
from cohortcraft.core.constants import DEFAULT_IMAGE_PROVIDER

ADAPTERS = {
    RunwareAdapter.name: RunwareAdapter,
    OpenAIImageAdapter.name: OpenAIImageAdapter,
    ReplicateAdapter.name: ReplicateAdapter,
}

def get_image_adapter(provider: Optional[str] = None, **kwargs) -> ImageGenerationAdapter:
    """
    Create an image generation adapter.

    Args:
        provider (str, optional): "runware", "openai" or "replicate". Defaults to image.provider.
        **kwargs: Passed to the adapter constructor

    Returns:
        ImageGenerationAdapter: The adapter

    Raises:
        ValueError: If the provider is unknown
        ConfigurationError: If the provider's API key is missing
    """
    provider = (provider or get_config_value("image.provider", DEFAULT_IMAGE_PROVIDER)).lower()
    adapter_class = ADAPTERS.get(provider)
    if adapter_class is None:
        raise ValueError(f"Unknown image provider: {provider}. Choose from {', '.join(sorted(ADAPTERS))}")
    return adapter_class(**kwargs)
