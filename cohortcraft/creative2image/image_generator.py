"""
Image generation for campaign creatives.

This module turns a creative's image prompt into a hosted image URL and stores
it on the creative row. The row is only written once a URL has been obtained,
so a failed generation never clears an existing image.
"""

from typing import Dict, Any, Optional

from cohortcraft.store.base import RowStore
from cohortcraft.creative2image.adapters import get_image_adapter
from cohortcraft.creative2image.adapters.base import ImageGenerationAdapter
from cohortcraft.core.config import get_config_value
from cohortcraft.core.error_handler import APIError, ConfigurationError, StoreError, validate_required_fields
from cohortcraft.core.logging_config import get_logger
from cohortcraft.core.constants import (
    MICRO_COHORTS_TABLE,
    CAMPAIGN_CREATIVES_TABLE,
    DEFAULT_IMAGE_WIDTH,
    DEFAULT_IMAGE_HEIGHT
)

# Initialize logger
logger = get_logger(__name__)

class ImageGenerator:
    """
    Generates images for creatives and stores their URLs.
    """

    def __init__(
        self,
        store: RowStore,
        adapter: Optional[ImageGenerationAdapter] = None,
        provider: Optional[str] = None
    ):
        """
        Initialize the image generator.

        Args:
            store (RowStore): Row store holding the creatives
            adapter (ImageGenerationAdapter, optional): Adapter to use. Created from
                provider (or image.provider) on first use if not provided.
            provider (str, optional): Provider name for the adapter registry
        """
        self.store = store
        self.adapter = adapter
        self.provider = provider
        logger.info("Initialized ImageGenerator")

    def _get_adapter(self) -> ImageGenerationAdapter:
        if self.adapter is None:
            self.adapter = get_image_adapter(self.provider)
        return self.adapter

    def generate_for_creative(self, creative_id: str, prompt: str) -> Dict[str, Any]:
        """
        Generate an image for a creative and store its URL.

        Args:
            creative_id (str): Creative to attach the image to
            prompt (str): Image generation prompt

        Returns:
            Dict[str, Any]: {"success": True, "imageUrl": url}

        Raises:
            ConfigurationError: If the provider API key is missing
            ValidationError: If prompt or creative_id is missing
            APIError: If generation fails or returns no URL
            RecordNotFoundError: If the creative does not exist
        """
        adapter = self._get_adapter()

        validate_required_fields(
            {"prompt": prompt, "creativeId": creative_id},
            ["prompt", "creativeId"],
            component="ImageGenerator"
        )

        width = get_config_value("image.width", DEFAULT_IMAGE_WIDTH)
        height = get_config_value("image.height", DEFAULT_IMAGE_HEIGHT)

        logger.info(f"Generating {width}x{height} image for creative {creative_id} with {adapter.name}")
        image_url = adapter.generate_image(prompt, width, height)

        self.store.update(CAMPAIGN_CREATIVES_TABLE, creative_id, {"image_url": image_url})
        logger.info(f"Stored image URL for creative {creative_id}")

        return {"success": True, "imageUrl": image_url}

    def update_image_prompt(self, creative_id: str, prompt: str, regenerate: bool = True) -> Dict[str, Any]:
        """
        Save an edited image prompt and optionally regenerate the image.

        Args:
            creative_id (str): Creative to edit
            prompt (str): New image prompt
            regenerate (bool): Whether to generate a new image from the prompt

        Returns:
            Dict[str, Any]: The updated creative row
        """
        validate_required_fields({"prompt": prompt}, ["prompt"], component="ImageGenerator")

        creative = self.store.update(CAMPAIGN_CREATIVES_TABLE, creative_id, {"image_prompt": prompt.strip()})
        logger.info(f"Updated image prompt for creative {creative_id}")

        if regenerate:
            result = self.generate_for_creative(creative_id, creative["image_prompt"])
            creative["image_url"] = result["imageUrl"]

        return creative

    def generate_missing_images(self, campaign_id: str) -> Dict[str, int]:
        """
        Generate images for every creative of a campaign that has a prompt but no image.

        Failures are logged per creative and counted; they do not stop the batch.

        Args:
            campaign_id (str): Campaign whose creatives are processed

        Returns:
            Dict[str, int]: Counts of generated and failed images
        """
        generated = 0
        failed = 0

        for cohort in self.store.select(MICRO_COHORTS_TABLE, campaign_id=campaign_id):
            for creative in self.store.select(CAMPAIGN_CREATIVES_TABLE, cohort_id=cohort["id"]):
                if creative.get("image_url") or not creative.get("image_prompt"):
                    continue
                try:
                    self.generate_for_creative(creative["id"], creative["image_prompt"])
                    generated += 1
                except (APIError, ConfigurationError, StoreError) as e:
                    logger.error(f"Failed to generate image for creative {creative['id']}: {e}")
                    failed += 1

        logger.info(f"Generated {generated} images for campaign {campaign_id} ({failed} failed)")
        return {"generated": generated, "failed": failed}
