"""
Creative generation for a single micro-cohort.
"""

from typing import Dict, Any, Optional

from cohortcraft.store.base import RowStore
from cohortcraft.campaign2cohort.brand_guidelines import BrandGuidelinesManager
from cohortcraft.campaign2cohort.llm_client import OpenAIChatClient
from cohortcraft.campaign2cohort.llm_templates import generate_creative_prompt, build_fallback_image_prompt
from cohortcraft.campaign2cohort.response_parser import parse_creative_response
from cohortcraft.compliance.phrase_checker import PhraseChecker
from cohortcraft.core.error_handler import validate_required_fields
from cohortcraft.core.logging_config import get_logger
from cohortcraft.core.constants import CAMPAIGNS_TABLE, MICRO_COHORTS_TABLE, CAMPAIGN_CREATIVES_TABLE

# Initialize logger
logger = get_logger(__name__)

class CreativeGenerator:
    """
    Generates one ad creative for a cohort.
    """

    def __init__(self, store: RowStore, llm_client: Optional[OpenAIChatClient] = None):
        self.store = store
        self.llm_client = llm_client
        self.brand_manager = BrandGuidelinesManager(store)
        logger.info("Initialized CreativeGenerator")

    def _get_client(self) -> OpenAIChatClient:
        if self.llm_client is None:
            self.llm_client = OpenAIChatClient()
        return self.llm_client

    def generate_for_cohort(self, cohort_id: str, campaign_id: str) -> Dict[str, Any]:
        """
        Generate and persist a creative for a cohort.

        Args:
            cohort_id (str): Cohort to write the creative for
            campaign_id (str): Campaign the cohort belongs to

        Returns:
            Dict[str, Any]: The stored creative row

        Raises:
            ConfigurationError: If the LLM API key is missing
            ValidationError: If cohort_id or campaign_id is missing
            RecordNotFoundError: If the cohort or campaign does not exist
            LLMParsingError: If the reply contains no creative
            StoreError: If the creative cannot be stored
        """
        client = self._get_client()

        validate_required_fields(
            {"cohortId": cohort_id, "campaignId": campaign_id},
            ["cohortId", "campaignId"],
            component="CreativeGenerator"
        )

        cohort = self.store.get(MICRO_COHORTS_TABLE, cohort_id)
        campaign = self.store.get(CAMPAIGNS_TABLE, campaign_id)
        brand = self.brand_manager.get(campaign.get("user_id"))

        prompts = generate_creative_prompt(campaign, cohort, brand)

        logger.info(f"Generating creative for cohort {cohort_id}")
        response = client.complete(prompts["system_prompt"], prompts["user_prompt"])
        creative = parse_creative_response(response)

        values = {
            "cohort_id": cohort_id,
            "headline": str(creative.get("headline", "")).strip(),
            "description": str(creative.get("description") or "").strip(),
            "cta": str(creative.get("cta") or "").strip(),
        }
        values["image_prompt"] = (
            str(creative.get("image_prompt") or "").strip()
            or build_fallback_image_prompt(cohort, values, brand)
        )

        row = self.store.insert(CAMPAIGN_CREATIVES_TABLE, values)

        PhraseChecker(BrandGuidelinesManager.banned_phrases(brand)).check_creative(row)

        logger.info(f"Stored creative {row['id']} for cohort {cohort_id}")
        return row
