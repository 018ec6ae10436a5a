"""
Shared fixtures for the cohortcraft tests.
"""

import json
import pytest
from unittest.mock import MagicMock

from cohortcraft.core.config import get_config, ENV_OVERRIDES
from cohortcraft.core.credentials import API_KEY_ENV_VARS
from cohortcraft.store.memory_store import MemoryStore

@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """
    Remove API keys from the environment and reset runtime config overrides.
    """
    for env_var in list(API_KEY_ENV_VARS.values()) + list(ENV_OVERRIDES) + ["SUPABASE_URL"]:
        monkeypatch.delenv(env_var, raising=False)
    get_config(reload=True)
    yield
    get_config(reload=True)

@pytest.fixture
def store():
    """
    Empty in-memory row store.
    """
    return MemoryStore()

@pytest.fixture
def brand_row():
    return {
        "user_id": "user-1",
        "brand_name": "Monsoon Escapes",
        "brand_tone": "Warm and adventurous",
        "brand_voice": "Second person, upbeat",
        "primary_color": "#0F766E",
        "secondary_color": "#F59E0B",
        "sample_tagline": "Rain makes it better",
        "do_not_use_phrases": "cheap, guaranteed",
    }

@pytest.fixture
def campaign(store):
    """
    A stored draft campaign owned by user-1.
    """
    return store.insert("campaigns", {
        "user_id": "user-1",
        "title": "Monsoon getaways",
        "prompt": "Promote monsoon travel packages to urban professionals aged 25-35",
        "budget": "$5,000",
        "primary_channel": "social",
        "content_type": "image",
        "status": "draft",
    })

@pytest.fixture
def cohort(store, campaign):
    return store.insert("micro_cohorts", {
        "campaign_id": campaign["id"],
        "title": "Urban Adventure Seekers",
        "description": "Young professionals who want short, exciting escapes",
        "demographics": "25-35, metro areas, high disposable income",
        "recommended_channels": ["social", "email"],
    })

@pytest.fixture
def creative(store, cohort):
    return store.insert("campaign_creatives", {
        "cohort_id": cohort["id"],
        "headline": "Chase the Rain",
        "description": "Trade the city for misty hills this monsoon.",
        "cta": "Book Now",
        "image_prompt": "Misty green hills at dawn, young couple on a balcony, warm light",
        "image_url": None,
    })

@pytest.fixture
def cohort_reply():
    """
    A cohort generation reply in the requested JSON shape.
    """
    return json.dumps({
        "microCohorts": [
            {
                "title": "Urban Adventure Seekers",
                "description": "Young professionals craving short escapes",
                "demographics": "25-35, metro areas",
                "estimatedReach": "120,000",
                "recommendedChannels": ["social", "display"],
                "creatives": [
                    {
                        "headline": "Chase the Rain",
                        "description": "Misty hills are closer than you think.",
                        "cta": "Book Now",
                        "imagePrompt": "Misty hills at dawn, couple on a balcony"
                    }
                ]
            },
            {
                "title": "Remote Workers",
                "description": "Professionals who can work from anywhere",
                "demographics": "28-40, tech and creative jobs",
                "estimatedReach": "80,000",
                "recommendedChannels": ["email"],
                "creatives": [
                    {
                        "headline": "Work Where It Pours",
                        "description": "Fast wifi, slow mornings, endless rain views.",
                        "callToAction": "Plan Your Stay",
                        "imagePrompt": "Laptop on a wooden desk facing a rainy valley"
                    }
                ]
            }
        ]
    })

def _make_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.content = json.dumps(payload).encode() if payload is not None else b""
    response.text = json.dumps(payload) if payload is not None else ""
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response

def _chat_response(content):
    return _make_response({
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ]
    })

@pytest.fixture
def make_response():
    """
    Factory for mock requests.Response objects returning a JSON payload.
    """
    return _make_response

@pytest.fixture
def chat_response():
    """
    Factory for mock chat completion responses with the given message content.
    """
    return _chat_response
