"""
Campaign intake and micro-cohort generation.

This module turns a free-text campaign brief plus brand context into
micro-cohort and creative rows. One composed prompt is sent to the LLM, the
reply is parsed JSON-first with text and raw fallbacks, and whatever was
extracted is persisted. Inserts are best-effort: a failing row is logged and
skipped, never retried or rolled back.
"""

from typing import Dict, Any, Optional

from cohortcraft.store.base import RowStore
from cohortcraft.campaign2cohort.brand_guidelines import BrandGuidelinesManager
from cohortcraft.campaign2cohort.llm_client import OpenAIChatClient
from cohortcraft.campaign2cohort.llm_templates import generate_cohort_prompt, build_fallback_image_prompt
from cohortcraft.campaign2cohort.response_parser import parse_cohort_response
from cohortcraft.compliance.phrase_checker import PhraseChecker
from cohortcraft.core.config import get_config_value
from cohortcraft.core.error_handler import StoreError, validate_required_fields
from cohortcraft.core.logging_config import get_logger
from cohortcraft.core.constants import (
    CAMPAIGNS_TABLE,
    MICRO_COHORTS_TABLE,
    CAMPAIGN_CREATIVES_TABLE,
    CAMPAIGN_STATUS_DRAFT,
    DEFAULT_BUDGET_TEXT,
    DEFAULT_NUM_COHORTS,
    DEFAULT_CREATIVES_PER_COHORT,
    DEFAULT_RECOMMENDED_CHANNELS
)

# Initialize logger
logger = get_logger(__name__)

class CampaignGenerator:
    """
    Creates campaigns and generates their micro-cohorts and creatives.
    """

    def __init__(self, store: RowStore, llm_client: Optional[OpenAIChatClient] = None):
        """
        Initialize the generator.

        Args:
            store (RowStore): Row store for campaigns, cohorts and creatives
            llm_client (OpenAIChatClient, optional): Chat client. Created on first use if not provided,
                which is when a missing API key is reported.
        """
        self.store = store
        self.llm_client = llm_client
        self.brand_manager = BrandGuidelinesManager(store)
        logger.info("Initialized CampaignGenerator")

    def _get_client(self) -> OpenAIChatClient:
        if self.llm_client is None:
            self.llm_client = OpenAIChatClient()
        return self.llm_client

    def create_campaign(
        self,
        user_id: str,
        title: str,
        prompt: str,
        budget: Optional[str] = None,
        primary_channel: str = "social",
        content_type: str = "image"
    ) -> Dict[str, Any]:
        """
        Persist a new draft campaign.

        Args:
            user_id (str): Campaign owner
            title (str): Campaign title
            prompt (str): Free-text campaign brief
            budget (str, optional): Budget text
            primary_channel (str): Primary channel tag
            content_type (str): Content type tag

        Returns:
            Dict[str, Any]: The stored campaign row
        """
        validate_required_fields(
            {"user_id": user_id, "title": title, "prompt": prompt},
            ["user_id", "title", "prompt"],
            component="CampaignGenerator"
        )

        campaign = self.store.insert(CAMPAIGNS_TABLE, {
            "user_id": user_id,
            "title": title.strip(),
            "prompt": prompt.strip(),
            "budget": budget or None,
            "primary_channel": primary_channel,
            "content_type": content_type,
            "status": CAMPAIGN_STATUS_DRAFT
        })

        logger.info(f"Created campaign {campaign['id']} for user {user_id}")
        return campaign

    def generate(
        self,
        campaign_id: str,
        prompt: str,
        brand_guidelines: Optional[Dict[str, Any]] = None,
        budget: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Generate and persist micro-cohorts for a campaign.

        Args:
            campaign_id (str): Campaign the cohorts belong to
            prompt (str): Free-text campaign brief
            brand_guidelines (Dict[str, Any], optional): Brand guidelines. Looked up from the
                campaign owner when not provided; defaults are used when the owner has none.
            budget (str, optional): Budget text. Falls back to the campaign's budget.

        Returns:
            Dict[str, Any]: campaign_id, parse_mode, microCohorts (persisted rows with their
                creatives), skipped (rows that failed to insert) and compliance issues

        Raises:
            ConfigurationError: If the LLM API key is missing
            ValidationError: If campaign_id or prompt is missing
            RecordNotFoundError: If the campaign does not exist
            APIError: If the LLM call fails
        """
        client = self._get_client()

        validate_required_fields(
            {"campaignId": campaign_id, "prompt": prompt},
            ["campaignId", "prompt"],
            component="CampaignGenerator"
        )

        campaign = self.store.get(CAMPAIGNS_TABLE, campaign_id)

        brand = brand_guidelines or self.brand_manager.get(campaign.get("user_id"))
        budget = budget or campaign.get("budget") or DEFAULT_BUDGET_TEXT

        prompts = generate_cohort_prompt(
            prompt,
            brand=brand,
            budget=budget,
            num_cohorts=get_config_value("generation.num_cohorts", DEFAULT_NUM_COHORTS),
            creatives_per_cohort=get_config_value("generation.creatives_per_cohort", DEFAULT_CREATIVES_PER_COHORT)
        )

        logger.info(f"Generating micro-cohorts for campaign {campaign_id}")
        response = client.complete(prompts["system_prompt"], prompts["user_prompt"])
        parsed = parse_cohort_response(response)
        logger.info(f"Parsed {len(parsed.cohorts)} cohorts from LLM response (mode: {parsed.mode})")

        checker = PhraseChecker(BrandGuidelinesManager.banned_phrases(brand))
        default_channels = get_config_value("generation.default_channels", DEFAULT_RECOMMENDED_CHANNELS)

        stored_cohorts = []
        issues = []
        skipped = 0

        for index, cohort in enumerate(parsed.cohorts, start=1):
            try:
                row = self.store.insert(MICRO_COHORTS_TABLE, {
                    "campaign_id": campaign_id,
                    "title": _as_text(cohort.get("title")) or f"Cohort {index}",
                    "description": _as_text(cohort.get("description")),
                    "demographics": _as_text(cohort.get("demographics")),
                    "recommended_channels": cohort.get("recommended_channels") or list(default_channels)
                })
            except StoreError as e:
                logger.error(f"Skipping cohort {index} of campaign {campaign_id}: {e}")
                skipped += 1 + len(cohort.get("creatives", []))
                continue

            issues.extend(checker.check_text(row["title"], f"cohort[{index}].title"))
            issues.extend(checker.check_text(row["description"], f"cohort[{index}].description"))

            row["creatives"] = []
            for creative in cohort.get("creatives", []):
                stored, failed = self._insert_creative(row, creative, brand)
                if failed:
                    skipped += 1
                    continue
                issues.extend(checker.check_creative(stored, prefix=f"cohort[{index}].creative"))
                row["creatives"].append(stored)

            stored_cohorts.append(row)

        logger.info(
            f"Stored {len(stored_cohorts)} cohorts for campaign {campaign_id}"
            f" ({skipped} rows skipped, {len(issues)} compliance issues)"
        )

        return {
            "campaign_id": campaign_id,
            "parse_mode": parsed.mode,
            "microCohorts": stored_cohorts,
            "skipped": skipped,
            "compliance": [issue.to_dict() for issue in issues]
        }

    def _insert_creative(
        self,
        cohort: Dict[str, Any],
        creative: Dict[str, Any],
        brand: Optional[Dict[str, Any]]
    ) -> tuple:
        """
        Insert one parsed creative under a stored cohort.

        Returns:
            tuple: (stored row or None, whether the insert failed)
        """
        values = {
            "headline": _as_text(creative.get("headline")),
            "description": _as_text(creative.get("description")),
            "cta": _as_text(creative.get("cta")),
        }
        values["image_prompt"] = (
            _as_text(creative.get("image_prompt"))
            or build_fallback_image_prompt(cohort, values, brand)
        )

        try:
            row = self.store.insert(CAMPAIGN_CREATIVES_TABLE, dict(values, cohort_id=cohort["id"]))
        except StoreError as e:
            logger.error(f"Skipping creative for cohort {cohort['id']}: {e}")
            return None, True

        return row, False


def _as_text(value: Any) -> str:
    """Coerce a parsed value to the string stored in a text column."""
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict):
        return ", ".join(f"{key}: {item}" for key, item in value.items())
    return str(value).strip()
