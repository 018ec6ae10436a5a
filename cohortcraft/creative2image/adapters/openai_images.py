"""
Adapter for the OpenAI image generation API.
"""

from typing import Dict, Any, Optional

import requests

from cohortcraft.creative2image.adapters.base import ImageGenerationAdapter
from cohortcraft.core.config import get_config_value
from cohortcraft.core.credentials import get_api_key
from cohortcraft.core.error_handler import handle_api_request
from cohortcraft.core.logging_config import get_logger, log_api_request
from cohortcraft.core.constants import OPENAI_API_ENDPOINT, DEFAULT_OPENAI_IMAGE_MODEL

# Initialize logger
logger = get_logger(__name__)

class OpenAIImageAdapter(ImageGenerationAdapter):
    """
    Image generation through the OpenAI images endpoint.
    """

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.api_key = api_key or get_api_key("openai")
        self.model = model or get_config_value("image.openai.model", DEFAULT_OPENAI_IMAGE_MODEL)
        api_base = api_base or get_config_value("llm.api_base", OPENAI_API_ENDPOINT)
        self.endpoint = f"{api_base.rstrip('/')}/images/generations"
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
            "model": options.get("model", self.model),
            "prompt": prompt,
            "n": 1,
            "size": f"{width}x{height}"
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        log_api_request(logger, "OpenAI Images", self.endpoint, payload)
        result = handle_api_request(
            requests.post,
            self.endpoint,
            payload=payload,
            headers=headers,
            error_message="OpenAI image generation failed",
            timeout=self.timeout
        )
        return self._require_url(result, self.endpoint)

    def extract_image_url(self, result: Any) -> Optional[str]:
        if not isinstance(result, dict):
            return None

        data = result.get("data")
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None

        if data[0].get("url"):
            return data[0]["url"]

        # Some models only return the image inline
        if data[0].get("b64_json"):
            return f"data:image/png;base64,{data[0]['b64_json']}"

        return None

    def get_service_info(self) -> Dict[str, Any]:
        return {
            "name": "OpenAI Images",
            "provider": self.name,
            "model": self.model,
            "endpoint": self.endpoint,
            "mode": "synchronous"
        }
