"""
Campaign review workflow.

This module provides the steps a user goes through after submitting a brief:
generating cohorts, filling in missing creatives and images, pruning cohorts,
editing prompts and finally activating the campaign.
"""

from typing import Dict, Any, List, Optional

from cohortcraft.store import get_store
from cohortcraft.store.base import RowStore
from cohortcraft.campaign2cohort.campaign_generator import CampaignGenerator
from cohortcraft.campaign2cohort.creative_generator import CreativeGenerator
from cohortcraft.creative2image.image_generator import ImageGenerator
from cohortcraft.core.error_handler import (
    APIError,
    AuthorizationError,
    ConfigurationError,
    LLMParsingError,
    StoreError,
    ValidationError
)
from cohortcraft.core.logging_config import get_logger
from cohortcraft.core.constants import (
    CAMPAIGNS_TABLE,
    MICRO_COHORTS_TABLE,
    CAMPAIGN_CREATIVES_TABLE,
    CAMPAIGN_STATUS_ACTIVE
)

# Initialize logger
logger = get_logger(__name__)

class CampaignWorkflow:
    """
    Runs and reviews campaigns end to end.
    """

    def __init__(
        self,
        store: Optional[RowStore] = None,
        campaign_generator: Optional[CampaignGenerator] = None,
        creative_generator: Optional[CreativeGenerator] = None,
        image_generator: Optional[ImageGenerator] = None
    ):
        """
        Initialize the workflow.

        Args:
            store: Row store. Defaults to the configured store.
            campaign_generator: Campaign generator instance.
            creative_generator: Creative generator instance.
            image_generator: Image generator instance.
        """
        self.store = store or get_store()
        self.campaign_generator = campaign_generator or CampaignGenerator(self.store)
        self.creative_generator = creative_generator or CreativeGenerator(self.store)
        self.image_generator = image_generator or ImageGenerator(self.store)

    def run(
        self,
        user_id: str,
        title: str,
        prompt: str,
        budget: Optional[str] = None,
        primary_channel: str = "social",
        content_type: str = "image",
        generate_images: bool = True
    ) -> Dict[str, Any]:
        """
        Create a campaign and generate everything it needs.

        The campaign is created first, then its cohorts, then a creative for any
        cohort that came back without one, then the images.

        Returns:
            The campaign as returned by load_campaign, with a "generation" summary.
        """
        campaign = self.campaign_generator.create_campaign(
            user_id, title, prompt,
            budget=budget,
            primary_channel=primary_channel,
            content_type=content_type
        )

        result = self.campaign_generator.generate(campaign["id"], campaign["prompt"], budget=budget)
        created = self.ensure_creatives(campaign["id"])

        images = {"generated": 0, "failed": 0}
        if generate_images:
            images = self.image_generator.generate_missing_images(campaign["id"])

        loaded = self.load_campaign(campaign["id"])
        loaded["generation"] = {
            "parse_mode": result["parse_mode"],
            "skipped": result["skipped"],
            "compliance": result["compliance"],
            "creatives_added": created,
            "images": images
        }
        return loaded

    def load_campaign(self, campaign_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Load a campaign with its cohorts and their creatives.

        Args:
            campaign_id: Campaign to load.
            user_id: If given, the campaign must belong to this user.

        Returns:
            The campaign row with a "cohorts" list, each cohort with a "creatives" list.

        Raises:
            RecordNotFoundError: If the campaign does not exist.
            AuthorizationError: If the campaign belongs to another user.
        """
        campaign = self.store.get(CAMPAIGNS_TABLE, campaign_id)
        if user_id is not None and campaign.get("user_id") != user_id:
            logger.warning(f"User {user_id} attempted to load campaign {campaign_id}")
            raise AuthorizationError("Campaign does not belong to this user")

        cohorts = self.store.select(MICRO_COHORTS_TABLE, campaign_id=campaign_id)
        for cohort in cohorts:
            cohort["creatives"] = self.store.select(CAMPAIGN_CREATIVES_TABLE, cohort_id=cohort["id"])

        campaign["cohorts"] = cohorts
        return campaign

    def ensure_creatives(self, campaign_id: str) -> int:
        """
        Generate a creative for every cohort of the campaign that has none.

        Failures are logged and skipped.

        Returns:
            Number of creatives created.
        """
        created = 0
        for cohort in self.store.select(MICRO_COHORTS_TABLE, campaign_id=campaign_id):
            if self.store.find_one(CAMPAIGN_CREATIVES_TABLE, cohort_id=cohort["id"]):
                continue
            try:
                self.creative_generator.generate_for_cohort(cohort["id"], campaign_id)
                created += 1
            except (APIError, ConfigurationError, LLMParsingError, StoreError) as e:
                logger.error(f"Failed to generate creative for cohort {cohort['id']}: {e}")

        if created:
            logger.info(f"Generated {created} missing creatives for campaign {campaign_id}")
        return created

    def select_cohorts(self, campaign_id: str, keep_ids: List[str]) -> List[str]:
        """
        Delete every cohort of the campaign that is not in keep_ids.

        Args:
            campaign_id: Campaign to prune.
            keep_ids: Cohorts to keep. At least one is required.

        Returns:
            Ids of the deleted cohorts.

        Raises:
            ValidationError: If no cohort is kept.
        """
        cohorts = self.store.select(MICRO_COHORTS_TABLE, campaign_id=campaign_id)
        keep = set(keep_ids or []) & {cohort["id"] for cohort in cohorts}
        if not keep:
            raise ValidationError("Please select at least one cohort", field="cohort_ids")

        deleted = []
        for cohort in cohorts:
            if cohort["id"] not in keep:
                self.store.delete(MICRO_COHORTS_TABLE, cohort["id"])
                deleted.append(cohort["id"])

        logger.info(f"Kept {len(keep)} cohorts of campaign {campaign_id}, deleted {len(deleted)}")
        return deleted

    def pending_images(self, campaign_id: str) -> List[str]:
        """
        Ids of the campaign's creatives that do not have an image yet.
        """
        pending = []
        for cohort in self.store.select(MICRO_COHORTS_TABLE, campaign_id=campaign_id):
            for creative in self.store.select(CAMPAIGN_CREATIVES_TABLE, cohort_id=cohort["id"]):
                if not creative.get("image_url"):
                    pending.append(creative["id"])
        return pending

    def save_campaign(self, campaign_id: str, force: bool = False) -> Dict[str, Any]:
        """
        Activate a campaign.

        Args:
            campaign_id: Campaign to activate.
            force: Activate even if some creatives have no image.

        Returns:
            {"saved": bool, "campaign": row, "pending": [creative ids without images]}
        """
        campaign = self.store.get(CAMPAIGNS_TABLE, campaign_id)
        pending = self.pending_images(campaign_id)

        if pending and not force:
            logger.warning(f"Campaign {campaign_id} has {len(pending)} creatives without images, not saving")
            return {"saved": False, "campaign": campaign, "pending": pending}

        campaign = self.store.update(CAMPAIGNS_TABLE, campaign_id, {"status": CAMPAIGN_STATUS_ACTIVE})
        logger.info(f"Campaign {campaign_id} is now {CAMPAIGN_STATUS_ACTIVE}")
        return {"saved": True, "campaign": campaign, "pending": pending}

    def list_campaigns(self, user_id: str) -> List[Dict[str, Any]]:
        """
        List a user's campaigns, newest first.
        """
        return self.store.select(CAMPAIGNS_TABLE, order_by="-created_at", user_id=user_id)

    def delete_creative(self, creative_id: str) -> None:
        self.store.delete(CAMPAIGN_CREATIVES_TABLE, creative_id)
        logger.info(f"Deleted creative {creative_id}")

    def delete_campaign(self, campaign_id: str) -> None:
        self.store.delete(CAMPAIGNS_TABLE, campaign_id)
        logger.info(f"Deleted campaign {campaign_id}")
