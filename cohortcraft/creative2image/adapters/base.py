"""
Base adapter interface for image generation services.

Every provider turns a text prompt into a hosted image URL. Provider response
shapes differ, so each adapter knows how to pull the URL out of its own
response; a response without a usable URL is an error.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional

from cohortcraft.core.error_handler import APIError
from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

class ImageGenerationAdapter(ABC):
    """
    Base adapter interface for image generation services.
    """

    #: Provider name used in the adapter registry and in logs
    name = "base"

    @abstractmethod
    def generate_image(
        self,
        prompt: str,
        width: int,
        height: int,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Generate an image based on a text prompt.

        Args:
            prompt (str): Text prompt describing the image to generate
            width (int): Desired image width in pixels
            height (int): Desired image height in pixels
            options (Dict[str, Any], optional): Additional options for the generation service

        Returns:
            str: URL of the generated image

        Raises:
            APIError: If image generation fails or the response has no usable URL
        """
        pass

    @abstractmethod
    def extract_image_url(self, result: Any) -> Optional[str]:
        """
        Extract the image URL from a provider response.

        Args:
            result (Any): Decoded response body

        Returns:
            Optional[str]: The URL, or None if the response does not contain one
        """
        pass

    @abstractmethod
    def get_service_info(self) -> Dict[str, Any]:
        """
        Get information about the image generation service.

        Returns:
            Dict[str, Any]: Service information including name, model and endpoint
        """
        pass

    def _require_url(self, result: Any, endpoint: str) -> str:
        """
        Return the URL from a response or raise if there is no usable one.
        """
        url = self.extract_image_url(result)
        if not isinstance(url, str) or not url.strip():
            logger.error(f"No image URL in {self.name} response")
            raise APIError(
                message=f"No image URL returned by {self.name}",
                response=result,
                endpoint=endpoint
            )
        logger.info(f"Generated image with {self.name}: {url[:60]}...")
        return url.strip()
