"""
Request handlers for the generation endpoints.

Each handler takes a decoded JSON request body and returns a (status, payload)
pair. Failures never escape a handler: they are logged and turned into an
{"error": message} payload with a status that reflects the error type.
"""

from typing import Dict, Any, Optional, Tuple

from cohortcraft.store import get_store
from cohortcraft.store.base import RowStore
from cohortcraft.campaign2cohort.brand_guidelines import BrandGuidelinesManager
from cohortcraft.campaign2cohort.campaign_generator import CampaignGenerator
from cohortcraft.campaign2cohort.creative_generator import CreativeGenerator
from cohortcraft.creative2image.image_generator import ImageGenerator
from cohortcraft.core.error_handler import (
    APIError,
    AuthorizationError,
    RecordNotFoundError,
    ValidationError,
    log_api_error
)
from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

HandlerResult = Tuple[int, Dict[str, Any]]

def error_status(error: Exception) -> int:
    """
    HTTP status for an error raised by a generator.
    """
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, AuthorizationError):
        return 401
    if isinstance(error, RecordNotFoundError):
        return 404
    return 500

def error_response(error: Exception, handler: str) -> HandlerResult:
    """
    Log an error and build the response payload for it.
    """
    if isinstance(error, APIError):
        log_api_error(error)
    logger.error(f"Error in {handler}: {error}")

    message = getattr(error, "message", None) or str(error) or "Unknown error"
    return error_status(error), {"error": message}

def _body(body: Any) -> Dict[str, Any]:
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body

def generate_campaign(body: Any, store: Optional[RowStore] = None, generator: Optional[CampaignGenerator] = None) -> HandlerResult:
    """
    Generate micro-cohorts for a campaign.

    Body: {campaignId, prompt, brandGuidelines?, budget?}
    """
    try:
        body = _body(body)
        generator = generator or CampaignGenerator(store or get_store())

        brand = body.get("brandGuidelines")
        if isinstance(brand, dict):
            brand = BrandGuidelinesManager.normalize(brand) or None
        else:
            brand = None

        result = generator.generate(
            body.get("campaignId"),
            body.get("prompt"),
            brand_guidelines=brand,
            budget=body.get("budget")
        )
        return 200, result
    except Exception as e:
        return error_response(e, "generate-campaign")

def generate_creatives(body: Any, store: Optional[RowStore] = None, generator: Optional[CreativeGenerator] = None) -> HandlerResult:
    """
    Generate a creative for a cohort.

    Body: {cohortId, campaignId}
    """
    try:
        body = _body(body)
        generator = generator or CreativeGenerator(store or get_store())

        creative = generator.generate_for_cohort(body.get("cohortId"), body.get("campaignId"))
        return 200, {"success": True, "creative": creative}
    except Exception as e:
        return error_response(e, "generate-creatives")

def generate_image(body: Any, store: Optional[RowStore] = None, generator: Optional[ImageGenerator] = None) -> HandlerResult:
    """
    Generate an image for a creative.

    Body: {prompt, creativeId}
    """
    try:
        body = _body(body)
        generator = generator or ImageGenerator(store or get_store())

        return 200, generator.generate_for_creative(body.get("creativeId"), body.get("prompt"))
    except Exception as e:
        return error_response(e, "generate-image")

HANDLERS = {
    "generate-campaign": generate_campaign,
    "generate-creatives": generate_creatives,
    "generate-image": generate_image,
}
