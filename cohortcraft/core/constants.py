"""
Constants for the cohortcraft package.

This module provides constants used throughout the cohortcraft package.
These constants can be easily changed in one place.
"""

# LLM Models
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000
DEFAULT_REQUEST_TIMEOUT = 60

# API Endpoints
OPENAI_API_ENDPOINT = "https://api.openai.com/v1"
RUNWARE_API_ENDPOINT = "https://api.runware.ai/v1"
REPLICATE_API_ENDPOINT = "https://api.replicate.com/v1"

# Image Generation
DEFAULT_IMAGE_PROVIDER = "runware"
DEFAULT_IMAGE_WIDTH = 768
DEFAULT_IMAGE_HEIGHT = 768
DEFAULT_RUNWARE_MODEL = "stable-diffusion-xl"
DEFAULT_OPENAI_IMAGE_MODEL = "dall-e-3"
DEFAULT_REPLICATE_MODEL = "black-forest-labs/flux-schnell"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_POLL_TIMEOUT = 300

# Generation defaults
DEFAULT_NUM_COHORTS = 2
DEFAULT_CREATIVES_PER_COHORT = 1
DEFAULT_RECOMMENDED_CHANNELS = ["social", "email", "display"]
DEFAULT_BUDGET_TEXT = "Not specified"

# Brand defaults used when a user has not saved brand guidelines
DEFAULT_BRAND_NAME = "Unknown"
DEFAULT_BRAND_TONE = "Professional and friendly"
DEFAULT_PRIMARY_COLOR = "#6366F1"
DEFAULT_SECONDARY_COLOR = "#0EA5E9"

# Campaign status values observed in the product (not enforced)
CAMPAIGN_STATUS_DRAFT = "draft"
CAMPAIGN_STATUS_ACTIVE = "active"

# Table names in the backend
BRAND_GUIDELINES_TABLE = "brand_guidelines"
CAMPAIGNS_TABLE = "campaigns"
MICRO_COHORTS_TABLE = "micro_cohorts"
CAMPAIGN_CREATIVES_TABLE = "campaign_creatives"

# Storage
DEFAULT_STORAGE_BACKEND = "json"
DEFAULT_STORE_PATH = "~/.cohortcraft/store.json"
