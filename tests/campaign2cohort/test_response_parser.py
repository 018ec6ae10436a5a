"""
Tests for parsing LLM replies into cohorts and creatives.
"""

import json
import pytest

from cohortcraft.campaign2cohort.response_parser import (
    parse_cohort_response,
    parse_creative_response,
    normalize_keys,
    RAW_COHORT_TITLE
)
from cohortcraft.core.error_handler import LLMParsingError

TEXT_REPLY = """Here are the cohorts for your campaign.

### Cohort 1: Urban Adventure Seekers
Description: Young professionals who want short escapes
from the city on long weekends.
Demographics: 25-35, metro areas
Estimated Reach: 120,000
Channels: social, display

Creative 1:
Headline: Chase the Rain
Description: Misty hills are closer than you think.
CTA: Book Now
Image Prompt: Misty green hills at dawn,
a couple on a wooden balcony, warm light

**Cohort 2:** Remote Workers
**Description:** Professionals who can work from anywhere
**Demographics:** 28-40, tech jobs
**Creative 1:**
**Headline:** Work Where It Pours
**Call to Action:** Plan Your Stay
"""

class TestParseCohortResponse:
    """
    Tests for parse_cohort_response.
    """

    def test_json_reply(self, cohort_reply):
        parsed = parse_cohort_response(cohort_reply)
        source = json.loads(cohort_reply)["microCohorts"]

        assert parsed.mode == "json"
        assert len(parsed.cohorts) == len(source)
        for cohort, expected in zip(parsed.cohorts, source):
            assert cohort["title"] == expected["title"]
            assert cohort["description"] == expected["description"]
            assert cohort["demographics"] == expected["demographics"]
            assert cohort["estimated_reach"] == expected["estimatedReach"]
            assert cohort["recommended_channels"] == expected["recommendedChannels"]
            assert len(cohort["creatives"]) == len(expected["creatives"])
            for creative, expected_creative in zip(cohort["creatives"], expected["creatives"]):
                assert creative["headline"] == expected_creative["headline"]
                assert creative["image_prompt"] == expected_creative["imagePrompt"]

        assert parsed.cohorts[1]["creatives"][0]["cta"] == "Plan Your Stay"

    def test_json_in_code_fence(self, cohort_reply):
        parsed = parse_cohort_response(f"```json\n{cohort_reply}\n```")

        assert parsed.mode == "json"
        assert len(parsed.cohorts) == 2

    def test_json_embedded_in_prose(self, cohort_reply):
        parsed = parse_cohort_response(f"Sure! Here is the result:\n{cohort_reply}\nLet me know if you need more.")

        assert parsed.mode == "json"
        assert parsed.cohorts[0]["title"] == "Urban Adventure Seekers"

    @pytest.mark.parametrize("key", ["micro_cohorts", "cohorts"])
    def test_alternative_list_keys(self, key):
        reply = json.dumps({key: [{"title": "Remote Workers", "channels": ["email"], "creative": {"headline": "Hi"}}]})

        parsed = parse_cohort_response(reply)

        assert parsed.cohorts[0]["recommended_channels"] == ["email"]
        assert parsed.cohorts[0]["creatives"] == [{"headline": "Hi"}]

    def test_bare_list(self):
        parsed = parse_cohort_response('[{"title": "A"}, {"title": "B"}]')

        assert parsed.mode == "json"
        assert [cohort["title"] for cohort in parsed.cohorts] == ["A", "B"]
        assert parsed.cohorts[0]["creatives"] == []

    def test_text_reply(self):
        parsed = parse_cohort_response(TEXT_REPLY)

        assert parsed.mode == "text"
        assert len(parsed.cohorts) == 2

        first, second = parsed.cohorts
        assert first["title"] == "Urban Adventure Seekers"
        assert first["description"] == "Young professionals who want short escapes from the city on long weekends."
        assert first["demographics"] == "25-35, metro areas"
        assert first["estimated_reach"] == "120,000"
        assert first["recommended_channels"] == ["social", "display"]
        assert first["creatives"] == [{
            "headline": "Chase the Rain",
            "description": "Misty hills are closer than you think.",
            "cta": "Book Now",
            "image_prompt": "Misty green hills at dawn, a couple on a wooden balcony, warm light"
        }]

        assert second["title"] == "Remote Workers"
        assert second["description"] == "Professionals who can work from anywhere"
        assert second["creatives"][0]["headline"] == "Work Where It Pours"
        assert second["creatives"][0]["cta"] == "Plan Your Stay"

    def test_text_reply_untitled_header(self):
        parsed = parse_cohort_response("Cohort 1:\nTitle: Night Owls\nDemographics: 18-24\n\nCohort 2:\nDescription: Early risers")

        assert [cohort["title"] for cohort in parsed.cohorts] == ["Night Owls", "Cohort 2"]

    def test_raw_fallback(self):
        reply = "I think you should target young professionals and families."

        parsed = parse_cohort_response(reply)

        assert parsed.mode == "raw"
        assert len(parsed.cohorts) == 1
        assert parsed.cohorts[0]["title"] == RAW_COHORT_TITLE
        assert parsed.cohorts[0]["description"] == reply
        assert parsed.cohorts[0]["creatives"] == []

    def test_empty_cohort_list(self):
        with pytest.raises(LLMParsingError):
            parse_cohort_response('{"microCohorts": []}')

    def test_json_without_cohorts_falls_back(self):
        parsed = parse_cohort_response('{"summary": "no audiences"}')

        assert parsed.mode == "raw"

    def test_text_reply_creatives_without_headers(self):
        reply = (
            "Cohort 1: Night Owls\n"
            "Description: Late shoppers\n"
            "Headline: Shop After Dark\n"
            "CTA: Shop Now\n"
            "Headline: Midnight Deals\n"
            "CTA: Browse\n"
        )

        creatives = parse_cohort_response(reply).cohorts[0]["creatives"]

        assert creatives == [
            {"headline": "Shop After Dark", "cta": "Shop Now"},
            {"headline": "Midnight Deals", "cta": "Browse"}
        ]

    def test_text_reply_labels_restate_headers(self):
        reply = (
            "Cohort 1: Night Owls\n"
            "Title: Night Owls\n"
            "Creative 1: Shop After Dark\n"
            "Headline: Shop After Dark\n"
            "CTA: Shop Now\n"
        )

        cohort = parse_cohort_response(reply).cohorts[0]

        assert cohort["title"] == "Night Owls"
        assert cohort["creatives"] == [{"headline": "Shop After Dark", "cta": "Shop Now"}]

    @pytest.mark.parametrize("prefix", ["1. ", "1) ", "- ", "* ", "## "])
    def test_text_reply_list_prefixes(self, prefix):
        second = prefix.replace("1", "2")
        reply = (
            f"{prefix}Cohort 1: Night Owls\n"
            "Description: Late shoppers\n"
            f"{second}Cohort 2: Early Birds\n"
            "Description: Morning commuters\n"
        )

        parsed = parse_cohort_response(reply)

        assert parsed.mode == "text"
        assert [cohort["title"] for cohort in parsed.cohorts] == ["Night Owls", "Early Birds"]

    @pytest.mark.parametrize("reply", ["", "   \n  ", None])
    def test_empty_reply(self, reply):
        with pytest.raises(LLMParsingError):
            parse_cohort_response(reply)


class TestParseCreativeResponse:
    """
    Tests for parse_creative_response.
    """

    def test_json_reply(self):
        creative = parse_creative_response(json.dumps({
            "headline": "Chase the Rain",
            "description": "Misty hills await.",
            "callToAction": "Book Now",
            "imagePrompt": "Misty hills at dawn"
        }))

        assert creative == {
            "headline": "Chase the Rain",
            "description": "Misty hills await.",
            "cta": "Book Now",
            "image_prompt": "Misty hills at dawn"
        }

    def test_nested_json_reply(self):
        creative = parse_creative_response('{"creatives": [{"headline": "Chase the Rain", "cta": "Go"}]}')

        assert creative["headline"] == "Chase the Rain"
        assert creative["cta"] == "Go"

    def test_text_reply(self):
        creative = parse_creative_response(
            "**Headline:** Chase the Rain\n**Description:** Misty hills await.\n"
            "**CTA:** Book Now\n**Image Prompt:** Misty hills at dawn,\nsoft light"
        )

        assert creative["headline"] == "Chase the Rain"
        assert creative["cta"] == "Book Now"
        assert creative["image_prompt"] == "Misty hills at dawn, soft light"

    def test_no_headline(self):
        with pytest.raises(LLMParsingError):
            parse_creative_response("I could not come up with anything.")


def test_normalize_keys():
    assert normalize_keys({
        "estimatedReach": "1k",
        "Recommended Channels": ["social"],
        "call_to_action": "Go",
        "CTA": "Go",
        "imagePrompt": "p"
    }) == {
        "estimated_reach": "1k",
        "recommended_channels": ["social"],
        "cta": "Go",
        "image_prompt": "p"
    }
