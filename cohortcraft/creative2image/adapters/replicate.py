"""
Adapter for the Replicate predictions API.

Replicate runs generation asynchronously: a prediction is submitted, then
polled until it reaches a terminal status. Polling stops with an error once
image.poll_timeout seconds have passed.
"""

import time
from typing import Dict, Any, Optional

import requests

from cohortcraft.creative2image.adapters.base import ImageGenerationAdapter
from cohortcraft.core.config import get_config_value
from cohortcraft.core.credentials import get_api_key
from cohortcraft.core.error_handler import APIError, handle_api_request
from cohortcraft.core.logging_config import get_logger, log_api_request
from cohortcraft.core.constants import (
    REPLICATE_API_ENDPOINT,
    DEFAULT_REPLICATE_MODEL,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_TIMEOUT
)

# Initialize logger
logger = get_logger(__name__)

TERMINAL_STATUSES = ["succeeded", "failed", "canceled"]

class ReplicateAdapter(ImageGenerationAdapter):
    """
    Image generation through Replicate, using submit-then-poll.
    """

    name = "replicate"

    def __init__(
        self,
        api_token: Optional[str] = None,
        model: Optional[str] = None,
        api_base: str = REPLICATE_API_ENDPOINT,
        poll_interval: Optional[float] = None,
        poll_timeout: Optional[float] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the adapter.

        Args:
            api_token (str, optional): Replicate API token. Defaults to REPLICATE_API_TOKEN.
            model (str, optional): Model in "owner/name" form. Defaults to image.replicate.model.
            api_base (str): API base URL.
            poll_interval (float, optional): Seconds between status checks. Defaults to image.poll_interval.
            poll_timeout (float, optional): Seconds to wait for a terminal status. Defaults to image.poll_timeout.
            timeout (float, optional): Per-request timeout. Defaults to image.timeout.
        """
        self.api_token = api_token or get_api_key("replicate")
        self.model = model or get_config_value("image.replicate.model", DEFAULT_REPLICATE_MODEL)
        self.api_base = api_base.rstrip("/")
        self.endpoint = f"{self.api_base}/predictions"
        self.poll_interval = poll_interval if poll_interval is not None else get_config_value("image.poll_interval", DEFAULT_POLL_INTERVAL)
        self.poll_timeout = poll_timeout if poll_timeout is not None else get_config_value("image.poll_timeout", DEFAULT_POLL_TIMEOUT)
        self.timeout = timeout or get_config_value("image.timeout", 120)

        logger.info(f"Initialized {self.__class__.__name__} with model {self.model}")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json"
        }

    def generate_image(
        self,
        prompt: str,
        width: int,
        height: int,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        options = options or {}
        payload = {
            "version": options.get("model", self.model),
            "input": {
                "prompt": prompt,
                "width": width,
                "height": height
            }
        }

        log_api_request(logger, "Replicate", self.endpoint, payload)
        prediction = handle_api_request(
            requests.post,
            self.endpoint,
            payload=payload,
            headers=self._headers(),
            error_message="Replicate prediction request failed",
            timeout=self.timeout
        )

        prediction = self._wait_for_prediction(prediction)
        return self._require_url(prediction, self.endpoint)

    def _wait_for_prediction(self, prediction: Any) -> Dict[str, Any]:
        """
        Poll a prediction until it succeeds.

        Raises:
            APIError: If the prediction fails, is canceled or does not finish in time
        """
        if not isinstance(prediction, dict) or not prediction.get("id"):
            raise APIError("Invalid response from Replicate", response=prediction, endpoint=self.endpoint)

        status_url = f"{self.endpoint}/{prediction['id']}"
        deadline = time.monotonic() + self.poll_timeout

        while prediction.get("status") not in TERMINAL_STATUSES:
            if time.monotonic() >= deadline:
                logger.error(f"Prediction {prediction['id']} did not finish within {self.poll_timeout}s")
                raise APIError(
                    message=f"Timed out waiting for prediction after {self.poll_timeout}s",
                    endpoint=status_url
                )

            time.sleep(self.poll_interval)
            prediction = handle_api_request(
                requests.get,
                status_url,
                headers=self._headers(),
                error_message="Replicate status request failed",
                timeout=self.timeout
            ) or {}
            logger.debug(f"Prediction {prediction.get('id')} status: {prediction.get('status')}")

        if prediction["status"] != "succeeded":
            logger.error(f"Prediction {prediction.get('id')} {prediction['status']}: {prediction.get('error')}")
            raise APIError(
                message=f"Image generation {prediction['status']}: {prediction.get('error') or 'no details'}",
                response=prediction,
                endpoint=status_url
            )

        return prediction

    def extract_image_url(self, result: Any) -> Optional[str]:
        if not isinstance(result, dict):
            return None

        output = result.get("output")
        if isinstance(output, str):
            return output
        if isinstance(output, list) and output:
            return output[0] if isinstance(output[0], str) else None
        return None

    def get_service_info(self) -> Dict[str, Any]:
        return {
            "name": "Replicate",
            "provider": self.name,
            "model": self.model,
            "endpoint": self.endpoint,
            "mode": "poll",
            "poll_interval": self.poll_interval,
            "poll_timeout": self.poll_timeout
        }
