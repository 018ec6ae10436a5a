"""
LLM prompt templates for cohort and creative generation.

This module provides the templates used to ask a chat-completion model for
micro-cohorts and ad creatives. Both prompts embed a brand guidelines block;
when the user has no brand guidelines the defaults below are substituted.
"""
from typing import Dict, Any, Optional

from cohortcraft.core.constants import (
    DEFAULT_BRAND_NAME,
    DEFAULT_BRAND_TONE,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
    DEFAULT_BUDGET_TEXT,
    DEFAULT_NUM_COHORTS,
    DEFAULT_CREATIVES_PER_COHORT
)
from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

BRAND_INFO_TEMPLATE = """Brand Guidelines:
- Brand Name: {brand_name}
- Tone: {brand_tone}
- Voice: {brand_voice}
- Brand Colors: {primary_color}, {secondary_color}
- Tagline: {sample_tagline}
- Do Not Use Phrases: {do_not_use_phrases}"""

# System prompt for cohort generation
COHORT_GENERATION_SYSTEM_PROMPT = "You generate structured marketing recommendations in JSON format only."

# User prompt template for cohort generation
COHORT_GENERATION_USER_PROMPT_TEMPLATE = """
You are a veteran marketing strategist. You follow David Ogilvy's advertising principles.

Based on the following brand guidelines and campaign brief, generate intelligent campaign recommendations.

---
{brand_info}

Campaign Brief:
{prompt}

Budget: {budget}

---

Your task:

1. Generate {num_cohorts} micro-cohorts likely to perform well for this campaign.
For each cohort, provide:
- Title
- Description (who they are and what motivates them)
- Demographic info (age, location, traits)
- Estimated reach (use a placeholder if unknown)
- Recommended channels

2. For each cohort, generate {creatives_per_cohort} ad creative(s) with:
- Headline (catchy, concise)
- Description (compelling ad copy, 1-2 sentences)
- Call-to-Action (brief action text like "Book Now" or "Learn More")
- Image Prompt (a detailed visual prompt for AI image generation: setting, subject,
  camera angle, lighting, style and mood, branding details, negative space for copy)

Never use any of the brand's do-not-use phrases.

Output the results as JSON with the following structure:
{{
  "microCohorts": [
    {{
      "title": "Cohort title",
      "description": "Detailed description",
      "demographics": "Age, location, traits list",
      "estimatedReach": "Reach estimate",
      "recommendedChannels": ["social", "email"],
      "creatives": [
        {{
          "headline": "Headline text",
          "description": "Ad copy",
          "cta": "Call to action text",
          "imagePrompt": "Detailed image generation prompt"
        }}
      ]
    }}
  ]
}}

Only return the JSON result, no other text. Ensure the JSON is valid and properly formatted.
If you cannot return JSON, use this plain-text layout instead:

Cohort 1: <title>
Description: <description>
Demographics: <demographics>
Estimated Reach: <reach>
Channels: <comma separated channels>
Creative 1:
Headline: <headline>
Description: <ad copy>
CTA: <call to action>
Image Prompt: <image prompt>
"""

# System prompt for single-cohort creative generation
CREATIVE_GENERATION_SYSTEM_PROMPT = "You generate structured marketing creative recommendations in JSON format only."

# User prompt template for single-cohort creative generation
CREATIVE_GENERATION_USER_PROMPT_TEMPLATE = """
You are a marketing creative director. Based on the following campaign and cohort information, generate creative recommendations.

---
{brand_info}

Campaign Brief:
{campaign_prompt}

Target Cohort:
- Name: {cohort_title}
- Description: {cohort_description}
- Demographics: {cohort_demographics}

---

Your task:

Generate a creative recommendation for this cohort including:
- Headline (catchy, concise headline for the ad)
- Description (compelling ad copy, 1-2 sentences)
- Call-to-Action (brief action text like "Book Now" or "Learn More")
- Image Prompt: Create a detailed visual prompt for AI image generation that represents this cohort and campaign.

For the image prompt, include:
- The setting/environment
- The main subject(s)
- Camera angle
- Lighting and time of day
- Style/mood
- Branding details
- Negative space guidance

Never use any of the brand's do-not-use phrases.

Output as JSON with this structure:
{{
  "headline": "Headline text",
  "description": "Description text",
  "cta": "Call to action text",
  "imagePrompt": "Detailed image generation prompt"
}}

Only return the JSON result, no other text. Ensure the JSON is valid and properly formatted.
"""

# Image prompt used when a parsed creative arrives without one
FALLBACK_IMAGE_PROMPT_TEMPLATE = (
    "Advertising photograph for {brand_name} aimed at {cohort_title} ({cohort_demographics}). "
    "Scene illustrating: {headline}. {description} "
    "Eye-level camera angle, soft natural lighting, {brand_tone} mood, "
    "accent colors {primary_color} and {secondary_color}, "
    "generous negative space for ad copy, no text in the image."
)

def brand_values(brand: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Get the brand values used by the templates, substituting defaults.

    Args:
        brand (Dict[str, Any], optional): Brand guidelines row or None

    Returns:
        Dict[str, str]: Template values
    """
    brand = brand or {}
    return {
        "brand_name": brand.get("brand_name") or DEFAULT_BRAND_NAME,
        "brand_tone": brand.get("brand_tone") or DEFAULT_BRAND_TONE,
        "brand_voice": brand.get("brand_voice") or "Not specified",
        "primary_color": brand.get("primary_color") or DEFAULT_PRIMARY_COLOR,
        "secondary_color": brand.get("secondary_color") or DEFAULT_SECONDARY_COLOR,
        "sample_tagline": brand.get("sample_tagline") or "None provided",
        "do_not_use_phrases": brand.get("do_not_use_phrases") or "None specified",
    }

def format_brand_info(brand: Optional[Dict[str, Any]]) -> str:
    """
    Format the brand guidelines block embedded in every prompt.

    Args:
        brand (Dict[str, Any], optional): Brand guidelines row or None for defaults

    Returns:
        str: Brand guidelines block
    """
    if not brand:
        logger.debug("No brand guidelines provided, using defaults")
    return BRAND_INFO_TEMPLATE.format(**brand_values(brand))

def generate_cohort_prompt(
    prompt: str,
    brand: Optional[Dict[str, Any]] = None,
    budget: Optional[str] = None,
    num_cohorts: int = DEFAULT_NUM_COHORTS,
    creatives_per_cohort: int = DEFAULT_CREATIVES_PER_COHORT
) -> Dict[str, str]:
    """
    Generate prompts for micro-cohort generation.

    Args:
        prompt (str): Free-text campaign brief
        brand (Dict[str, Any], optional): Brand guidelines
        budget (str, optional): Campaign budget text
        num_cohorts (int): Number of cohorts to request
        creatives_per_cohort (int): Number of creatives to request per cohort

    Returns:
        Dict[str, str]: Dictionary containing system and user prompts
    """
    user_prompt = COHORT_GENERATION_USER_PROMPT_TEMPLATE.format(
        brand_info=format_brand_info(brand),
        prompt=prompt,
        budget=budget or DEFAULT_BUDGET_TEXT,
        num_cohorts=num_cohorts,
        creatives_per_cohort=creatives_per_cohort
    )

    return {
        "system_prompt": COHORT_GENERATION_SYSTEM_PROMPT,
        "user_prompt": user_prompt
    }

def generate_creative_prompt(
    campaign: Dict[str, Any],
    cohort: Dict[str, Any],
    brand: Optional[Dict[str, Any]] = None
) -> Dict[str, str]:
    """
    Generate prompts for a single cohort's creative.

    Args:
        campaign (Dict[str, Any]): Campaign row
        cohort (Dict[str, Any]): Micro-cohort row
        brand (Dict[str, Any], optional): Brand guidelines

    Returns:
        Dict[str, str]: Dictionary containing system and user prompts
    """
    user_prompt = CREATIVE_GENERATION_USER_PROMPT_TEMPLATE.format(
        brand_info=format_brand_info(brand),
        campaign_prompt=campaign.get("prompt", ""),
        cohort_title=cohort.get("title", ""),
        cohort_description=cohort.get("description", ""),
        cohort_demographics=cohort.get("demographics", "")
    )

    return {
        "system_prompt": CREATIVE_GENERATION_SYSTEM_PROMPT,
        "user_prompt": user_prompt
    }

def build_fallback_image_prompt(
    cohort: Dict[str, Any],
    creative: Dict[str, Any],
    brand: Optional[Dict[str, Any]] = None
) -> str:
    """
    Build an image prompt from a creative's copy when the model did not supply one.

    Args:
        cohort (Dict[str, Any]): Cohort the creative targets
        creative (Dict[str, Any]): Creative copy (headline, description)
        brand (Dict[str, Any], optional): Brand guidelines

    Returns:
        str: Image generation prompt
    """
    values = brand_values(brand)
    return FALLBACK_IMAGE_PROMPT_TEMPLATE.format(
        brand_name=values["brand_name"],
        brand_tone=values["brand_tone"].lower(),
        primary_color=values["primary_color"],
        secondary_color=values["secondary_color"],
        cohort_title=cohort.get("title") or "the target audience",
        cohort_demographics=cohort.get("demographics") or "general audience",
        headline=creative.get("headline") or "the campaign offer",
        description=creative.get("description") or ""
    ).replace("  ", " ")
