"""
Adapter for the Runware image generation API.

A single synchronous call returns the generated image.
"""

from typing import Dict, Any, Optional

import requests

from cohortcraft.creative2image.adapters.base import ImageGenerationAdapter
from cohortcraft.core.config import get_config_value
from cohortcraft.core.credentials import get_api_key
from cohortcraft.core.error_handler import handle_api_request
from cohortcraft.core.logging_config import get_logger, log_api_request
from cohortcraft.core.constants import RUNWARE_API_ENDPOINT, DEFAULT_RUNWARE_MODEL

# Initialize logger
logger = get_logger(__name__)

class RunwareAdapter(ImageGenerationAdapter):
    """
    Image generation through Runware.
    """

    name = "runware"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: str = RUNWARE_API_ENDPOINT,
        timeout: Optional[float] = None
    ):
        """
        Initialize the adapter.

        Args:
            api_key (str, optional): Runware API key. Defaults to RUNWARE_API_KEY.
            model (str, optional): Model to use. Defaults to image.runware.model.
            api_base (str): API base URL.
            timeout (float, optional): Request timeout. Defaults to image.timeout.
        """
        self.api_key = api_key or get_api_key("runware")
        self.model = model or get_config_value("image.runware.model", DEFAULT_RUNWARE_MODEL)
        self.endpoint = f"{api_base.rstrip('/')}/image/generation"
        self.timeout = timeout or get_config_value("image.timeout", 120)

        logger.info(f"Initialized {self.__class__.__name__} with model {self.model}")

    def generate_image(
        self,
        prompt: str,
        width: int,
        height: int,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        options = options or {}
        payload = {
            "prompt": prompt,
            "width": width,
            "height": height,
            "model": options.get("model", self.model)
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        log_api_request(logger, "Runware", self.endpoint, payload)
        result = handle_api_request(
            requests.post,
            self.endpoint,
            payload=payload,
            headers=headers,
            error_message="Runware image generation failed",
            timeout=self.timeout
        )
        return self._require_url(result, self.endpoint)

    def extract_image_url(self, result: Any) -> Optional[str]:
        if not isinstance(result, dict):
            return None

        images = result.get("images")
        if isinstance(images, list) and images:
            first = images[0]
            if isinstance(first, str):
                return first
            if isinstance(first, dict):
                return first.get("url") or first.get("imageURL")

        data = result.get("data")
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return data[0].get("imageURL")

        return None

    def get_service_info(self) -> Dict[str, Any]:
        return {
            "name": "Runware",
            "provider": self.name,
            "model": self.model,
            "endpoint": self.endpoint,
            "mode": "synchronous"
        }
