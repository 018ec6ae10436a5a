"""
cohortcraft - AI micro-cohort and ad creative generation

Turns a free-text campaign brief and brand guidelines into audience
micro-cohorts, ad copy and images, persisted as campaign rows.
"""

__version__ = "0.1.0"

# Import main components for easier access
from cohortcraft.store import get_store
from cohortcraft.campaign2cohort.brand_guidelines import BrandGuidelinesManager
from cohortcraft.campaign2cohort.campaign_generator import CampaignGenerator
from cohortcraft.campaign2cohort.creative_generator import CreativeGenerator
from cohortcraft.creative2image.image_generator import ImageGenerator
from cohortcraft.pipeline.campaign_workflow import CampaignWorkflow
