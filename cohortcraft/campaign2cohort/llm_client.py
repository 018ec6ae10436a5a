"""
LLM client for the OpenAI chat completions API.

This module provides a client that sends one composed prompt to a
chat-completion endpoint and returns the text of the first reply.
"""

import os
import json
import datetime
from typing import Dict, Any, Optional

import requests

from cohortcraft.core.logging_config import get_logger
from cohortcraft.core.credentials import get_api_key
from cohortcraft.core.config import get_config_value
from cohortcraft.core.error_handler import APIError, handle_api_request
from cohortcraft.core.constants import (
    DEFAULT_LLM_MODEL,
    OPENAI_API_ENDPOINT,
    DEFAULT_TEMPERATURE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_REQUEST_TIMEOUT
)

# Initialize logger
logger = get_logger(__name__)

class OpenAIChatClient:
    """
    Client for making chat completion calls.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        log_file: Optional[str] = None
    ):
        """
        Initialize the chat client.

        Args:
            api_key (str, optional): API key. If not provided, read from OPENAI_API_KEY.
            model (str, optional): Model to use. Defaults to llm.model from config.
            temperature (float, optional): Sampling temperature. Defaults to llm.temperature.
            max_tokens (int, optional): Maximum tokens for the reply. Defaults to llm.max_tokens.
            api_base (str, optional): API base URL. Defaults to llm.api_base.
            timeout (float, optional): Request timeout in seconds. Defaults to llm.timeout.
            log_file (str, optional): File that receives every request and response as JSON.

        Raises:
            ConfigurationError: If no API key is available
        """
        # Resolve the key first so a missing key fails before any request is made
        self.api_key = api_key or get_api_key("openai")

        self.model = model or get_config_value("llm.model", DEFAULT_LLM_MODEL)
        self.temperature = temperature if temperature is not None else get_config_value("llm.temperature", DEFAULT_TEMPERATURE)
        self.max_tokens = max_tokens or get_config_value("llm.max_tokens", DEFAULT_MAX_TOKENS)
        self.timeout = timeout or get_config_value("llm.timeout", DEFAULT_REQUEST_TIMEOUT)
        self.api_base = (api_base or get_config_value("llm.api_base", OPENAI_API_ENDPOINT)).rstrip("/")
        self.endpoint = f"{self.api_base}/chat/completions"

        self.log_file = log_file
        if self.log_file:
            logger.info(f"LLM requests and responses will be logged to {self.log_file}")
            os.makedirs(os.path.dirname(os.path.abspath(self.log_file)), exist_ok=True)

        logger.info(f"Initialized {self.__class__.__name__} with model {self.model}")

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Send a system and user prompt and return the reply text.

        Args:
            system_prompt (str): System prompt for the LLM
            user_prompt (str): User prompt for the LLM
            options (Dict[str, Any], optional): Overrides for temperature and max_tokens

        Returns:
            str: Content of the first choice's message

        Raises:
            APIError: If the call fails or the response has no message content
        """
        logger.info(f"Requesting completion from model {self.model}")
        logger.debug(f"User prompt: {user_prompt[:100]}...")

        options = options or {}

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "temperature": options.get("temperature", self.temperature),
            "max_tokens": options.get("max_tokens", self.max_tokens)
        }

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        self._log_to_file({
            "timestamp": datetime.datetime.now().isoformat(),
            "type": "request",
            "model": self.model,
            "payload": payload
        })

        result = handle_api_request(
            requests.post,
            self.endpoint,
            payload=payload,
            headers=headers,
            error_message="Chat completion request failed",
            timeout=self.timeout
        )

        self._log_to_file({
            "timestamp": datetime.datetime.now().isoformat(),
            "type": "response",
            "response": result
        })

        content = self._extract_content(result)
        if content is None:
            logger.error("No message content in chat completion response")
            raise APIError(
                message="Invalid response from chat completion API",
                response=result,
                endpoint=self.endpoint
            )

        logger.debug(f"Content: {content[:100]}...")
        return content

    @staticmethod
    def _extract_content(result: Any) -> Optional[str]:
        """
        Pull the text out of a chat completion body.

        The content may be a plain string or a list of typed parts.
        """
        if not isinstance(result, dict) or not isinstance(result.get("choices"), list) or not result["choices"]:
            return None

        choice = result["choices"][0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            return None
        content = message.get("content")

        if isinstance(content, list):
            content = "".join(
                item.get("text", "") for item in content
                if isinstance(item, dict) and item.get("type") == "text"
            )

        return content if isinstance(content, str) else None

    def _log_to_file(self, data: Dict[str, Any]) -> None:
        """
        Append data to the log file, if one was configured.
        """
        if not self.log_file:
            return

        try:
            with open(self.log_file, 'a') as f:
                f.write(json.dumps(data, indent=2))
                f.write("\n\n")
        except OSError as e:
            logger.error(f"Error writing to log file {self.log_file}: {str(e)}")
