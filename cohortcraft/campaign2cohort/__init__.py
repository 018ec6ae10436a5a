"""
Campaign brief to micro-cohort generation.

This package turns a free-text campaign brief and brand guidelines into
micro-cohorts and ad creatives using a chat-completion LLM.
"""

from cohortcraft.campaign2cohort.brand_guidelines import BrandGuidelinesManager
from cohortcraft.campaign2cohort.llm_client import OpenAIChatClient
from cohortcraft.campaign2cohort.response_parser import ParsedCohorts, parse_cohort_response, parse_creative_response
from cohortcraft.campaign2cohort.campaign_generator import CampaignGenerator
from cohortcraft.campaign2cohort.creative_generator import CreativeGenerator
