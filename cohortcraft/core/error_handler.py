"""
Error handling module.

This module provides the exception taxonomy used across cohortcraft and a
helper that wraps every outgoing HTTP call so that upstream failures are
reported consistently.

Errors are never retried: a failed call is logged and raised to the caller.
"""

import logging
from typing import Dict, Any, Optional, Callable

import requests

from cohortcraft.core.logging_config import redact_sensitive_data

logger = logging.getLogger(__name__)

class APIError(Exception):
    """
    Exception raised for upstream API errors.

    Attributes:
        message: Error message.
        status_code: HTTP status code.
        response: API response.
        endpoint: API endpoint.
        request_data: Request data.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[Any] = None,
        endpoint: Optional[str] = None,
        request_data: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.response = response
        self.endpoint = endpoint
        self.request_data = request_data

        detailed_message = f"API Error: {message}"
        if status_code:
            detailed_message += f" (Status Code: {status_code})"
        if endpoint:
            detailed_message += f" (Endpoint: {endpoint})"

        super().__init__(detailed_message)


class ValidationError(Exception):
    """
    Exception raised for missing or invalid parameters.

    Attributes:
        message: Error message.
        field: Field that failed validation.
        value: Value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None
    ):
        self.message = message
        self.field = field
        self.value = value

        detailed_message = f"Validation Error: {message}"
        if field:
            detailed_message += f" (Field: {field})"

        super().__init__(detailed_message)


class ConfigurationError(Exception):
    """
    Exception raised for configuration errors, such as a missing API key.

    Attributes:
        message: Error message.
        component: Component that has a configuration error.
        missing_keys: Keys that are missing from the configuration.
    """

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        missing_keys: Optional[list] = None
    ):
        self.message = message
        self.component = component
        self.missing_keys = missing_keys or []

        detailed_message = f"Configuration Error: {message}"
        if component:
            detailed_message += f" (Component: {component})"
        if missing_keys:
            detailed_message += f" (Missing Keys: {', '.join(missing_keys)})"

        super().__init__(detailed_message)


class AuthorizationError(Exception):
    """Exception raised when a caller is not allowed to perform an operation."""

    def __init__(self, message: str = "Unauthorized"):
        self.message = message
        super().__init__(f"Authorization Error: {message}")


class StoreError(Exception):
    """
    Exception raised when the row store rejects or fails an operation.

    Attributes:
        message: Error message.
        table: Table the operation targeted.
    """

    def __init__(self, message: str, table: Optional[str] = None):
        self.message = message
        self.table = table

        detailed_message = f"Store Error: {message}"
        if table:
            detailed_message += f" (Table: {table})"

        super().__init__(detailed_message)


class RecordNotFoundError(StoreError):
    """Exception raised when a row lookup by id finds nothing."""

    def __init__(self, table: str, row_id: Any):
        self.row_id = row_id
        super().__init__(f"No row with id {row_id}", table=table)


class LLMParsingError(Exception):
    """Exception raised when parsing an LLM response fails."""
    pass


def handle_api_request(
    request_func: Callable,
    endpoint: str,
    payload: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    error_message: str = "API request failed",
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None
) -> Any:
    """
    Handle an API request with error handling.

    Args:
        request_func: Function to make the API request (requests.post, requests.get, ...).
        endpoint: API endpoint.
        payload: JSON request body, if any.
        headers: Request headers.
        error_message: Error message prefix used if the request fails.
        params: Query string parameters.
        timeout: Request timeout in seconds.

    Returns:
        The decoded JSON body, or None when the response has no body.

    Raises:
        APIError: If the API request fails or the body is not JSON.
    """
    kwargs = {"headers": headers or {}}
    if payload is not None:
        kwargs["json"] = payload
    if params:
        kwargs["params"] = params
    if timeout is not None:
        kwargs["timeout"] = timeout

    response = None
    try:
        response = request_func(endpoint, **kwargs)
        response.raise_for_status()

    except requests.exceptions.HTTPError as e:
        if e.response is not None:
            status_code = e.response.status_code
            response_text = e.response.text
        else:
            status_code = getattr(response, 'status_code', None)
            response_text = getattr(response, 'text', str(e))

        logger.error(f"HTTP error: {e}")
        logger.error(f"Response: {response_text}")

        raise APIError(
            message=f"{error_message}: {response_text or e}",
            status_code=status_code,
            response=response_text,
            endpoint=endpoint,
            request_data=payload
        ) from e

    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error: {e}")

        raise APIError(
            message=f"{error_message}: Connection error",
            endpoint=endpoint,
            request_data=payload
        ) from e

    except requests.exceptions.Timeout as e:
        logger.error(f"Timeout error: {e}")

        raise APIError(
            message=f"{error_message}: Request timed out",
            endpoint=endpoint,
            request_data=payload
        ) from e

    except requests.exceptions.RequestException as e:
        logger.error(f"Request error: {e}")

        raise APIError(
            message=f"{error_message}: {e}",
            endpoint=endpoint,
            request_data=payload
        ) from e

    if not response.content:
        return None

    try:
        return response.json()
    except ValueError as e:
        logger.error(f"Failed to parse API response: {e}")

        raise APIError(
            message=f"Failed to parse API response: {e}",
            status_code=response.status_code,
            response=response.text,
            endpoint=endpoint,
            request_data=payload
        ) from e


def validate_required_fields(
    data: Dict[str, Any],
    required_fields: list,
    component: str = "Unknown"
) -> None:
    """
    Validate that required fields are present and non-empty in the data.

    Args:
        data: Data to validate.
        required_fields: List of required field names.
        component: Component name for error reporting.

    Raises:
        ValidationError: If a required field is missing.
    """
    missing_fields = [field for field in required_fields if not data.get(field)]

    if missing_fields:
        logger.error(f"{component}: missing required parameters {missing_fields}")
        raise ValidationError(
            message=f"Missing required parameters: {' and '.join(missing_fields)}",
            field=missing_fields[0]
        )


def log_api_error(error: APIError) -> None:
    """
    Log an API error with detailed information.

    Args:
        error: API error to log.
    """
    logger.error(f"API Error: {error.message}")

    if error.status_code:
        logger.error(f"Status Code: {error.status_code}")

    if error.endpoint:
        logger.error(f"Endpoint: {error.endpoint}")

    if error.response:
        logger.error(f"Response: {error.response}")

    if error.request_data:
        logger.error(f"Request Data: {redact_sensitive_data(error.request_data)}")
