"""
Parsing of LLM replies into cohort and creative dictionaries.

Replies are parsed JSON-first. When the model ignores the requested JSON
shape, "Cohort N:" / "Creative N:" headed text is recognised instead, and as
a last resort the whole reply becomes a single cohort so that nothing the
model produced is lost.
"""

import re
import json
from typing import Dict, Any, List, Optional

from cohortcraft.core.error_handler import LLMParsingError
from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

PARSE_MODE_JSON = "json"
PARSE_MODE_TEXT = "text"
PARSE_MODE_RAW = "raw"

RAW_COHORT_TITLE = "Generated audience"

# Keys that may hold the cohort list in a JSON reply
COHORT_LIST_KEYS = ["microCohorts", "micro_cohorts", "cohorts"]

# snake_case key -> canonical field name
KEY_ALIASES = {
    "call_to_action": "cta",
    "channels": "recommended_channels",
    "reach": "estimated_reach",
    "demographic_info": "demographics",
    "name": "title",
    "creative": "creatives",
}

# Label text in plain-text replies -> field name
TEXT_LABELS = {
    "title": "title",
    "name": "title",
    "description": "description",
    "demographics": "demographics",
    "demographic info": "demographics",
    "estimated reach": "estimated_reach",
    "reach": "estimated_reach",
    "channels": "recommended_channels",
    "recommended channels": "recommended_channels",
    "headline": "headline",
    "cta": "cta",
    "call to action": "cta",
    "call-to-action": "cta",
    "image prompt": "image_prompt",
}

CREATIVE_FIELDS = ["headline", "description", "cta", "image_prompt"]

COHORT_HEADER_PATTERN = re.compile(r'^cohort\s+(\d+)\s*:\s*(.*)$', re.IGNORECASE)
CREATIVE_HEADER_PATTERN = re.compile(r'^creative\s+(\d+)\s*:?\s*(.*)$', re.IGNORECASE)
LABEL_PATTERN = re.compile(
    r'^(' + '|'.join(sorted((re.escape(label) for label in TEXT_LABELS), key=len, reverse=True)) + r')\s*:\s*(.*)$',
    re.IGNORECASE
)


class ParsedCohorts:
    """
    Result of parsing a cohort generation reply.
    """

    def __init__(self, cohorts: List[Dict[str, Any]], mode: str):
        """
        Initialize the result.

        Args:
            cohorts: Cohort dictionaries, each with a "creatives" list.
            mode: How the reply was understood: "json", "text" or "raw".
        """
        self.cohorts = cohorts
        self.mode = mode

    def __len__(self) -> int:
        return len(self.cohorts)

    def __repr__(self) -> str:
        return f"ParsedCohorts(mode={self.mode!r}, cohorts={len(self.cohorts)})"


def _snake_case(key: str) -> str:
    key = re.sub(r'(?<=[a-z0-9])(?=[A-Z])', '_', key.strip())
    return re.sub(r'[\s\-]+', '_', key).lower()


def normalize_keys(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert the keys of a cohort or creative dictionary to canonical field names.

    Values are carried over unchanged, except that nested creatives are
    normalized as well and a single creative object becomes a one-item list.
    """
    normalized = {}
    for key, value in item.items():
        field = _snake_case(key)
        field = KEY_ALIASES.get(field, field)

        if field == "creatives":
            if isinstance(value, dict):
                value = [value]
            if isinstance(value, list):
                value = [normalize_keys(creative) for creative in value if isinstance(creative, dict)]

        normalized[field] = value
    return normalized


def _strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = re.sub(r'^```[a-zA-Z]*\s*', '', cleaned)
    cleaned = re.sub(r'\s*```$', '', cleaned)
    return cleaned


def _load_json(text: str) -> Optional[Any]:
    """
    Load JSON from the whole text, else from its outermost object or array.
    """
    cleaned = _strip_code_fences(text)

    try:
        return json.loads(cleaned)
    except ValueError:
        pass

    for pattern in (r'\{[\s\S]*\}', r'\[[\s\S]*\]'):
        match = re.search(pattern, cleaned)
        if not match:
            continue
        try:
            return json.loads(match.group(0))
        except ValueError:
            logger.debug(f"Embedded block is not valid JSON: {match.group(0)[:100]}...")

    return None


def _cohorts_from_json(data: Any) -> Optional[List[Dict[str, Any]]]:
    """
    Cohorts from a decoded JSON reply.

    Returns None when the data holds no cohorts, and an empty list when it
    names a cohort list that is empty.
    """
    items = None
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        for key in COHORT_LIST_KEYS:
            if isinstance(data.get(key), list):
                if not data[key]:
                    return []
                items = data[key]
                break
        else:
            if "title" in data:
                items = [data]

    if not items:
        return None

    cohorts = []
    for item in items:
        if not isinstance(item, dict):
            continue
        cohort = normalize_keys(item)
        cohort.setdefault("creatives", [])
        if not isinstance(cohort["creatives"], list):
            cohort["creatives"] = []
        cohorts.append(cohort)
    return cohorts or None


def _clean_line(line: str) -> str:
    """Remove markdown decoration (headings, bold, bullets, list numbers) from a line."""
    line = line.strip()
    line = re.sub(r'^#+\s*', '', line)
    line = line.replace("**", "").replace("__", "")
    line = re.sub(r'^[-*]\s+', '', line)
    line = re.sub(r'^\d+[.)]\s+', '', line)
    return line.strip()


def _append(target: Dict[str, Any], field: str, text: str) -> None:
    if not text:
        return
    current = target.get(field)
    target[field] = f"{current} {text}" if current else text


def _finish_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    for field, value in list(item.items()):
        if isinstance(value, str):
            item[field] = value.strip()
    channels = item.get("recommended_channels")
    if isinstance(channels, str):
        item["recommended_channels"] = [c.strip() for c in re.split(r'[,;]', channels) if c.strip()]
    return item


def _cohorts_from_text(text: str) -> List[Dict[str, Any]]:
    cohorts = []
    cohort = None
    creative = None
    target = None
    field = None
    # Values taken from a header line, which a matching label restates
    header_title = None
    header_headline = None

    for raw_line in text.splitlines():
        line = _clean_line(raw_line)
        if not line:
            continue

        header = COHORT_HEADER_PATTERN.match(line)
        if header:
            cohort = {"title": header.group(2).strip(), "creatives": []}
            cohorts.append(cohort)
            header_title = cohort if cohort["title"] else None
            creative = None
            target, field = cohort, None
            continue

        if cohort is None:
            # Preamble before the first cohort
            continue

        header = CREATIVE_HEADER_PATTERN.match(line)
        if header:
            creative = {}
            cohort["creatives"].append(creative)
            target, field = creative, None
            if header.group(2).strip():
                creative["headline"] = header.group(2).strip()
            header_headline = creative if creative.get("headline") else None
            continue

        label = LABEL_PATTERN.match(line)
        if label:
            field = TEXT_LABELS[label.group(1).lower()]
            value = label.group(2).strip()
            # A second headline starts the next creative
            if field == "headline" and (
                creative is None or (creative.get("headline") and creative is not header_headline)
            ):
                creative = {}
                cohort["creatives"].append(creative)
            if creative is not None and field in CREATIVE_FIELDS:
                target = creative
            else:
                target = cohort

            if field == "title" and target is header_title:
                target["title"] = value
                header_title = None
            elif field == "headline" and target is header_headline:
                target["headline"] = value
                header_headline = None
            else:
                _append(target, field, value)
            continue

        # Continuation of the previous value, or loose text under a header
        _append(target, field or "description", line)

    for index, cohort in enumerate(cohorts, start=1):
        cohort["creatives"] = [_finish_fields(c) for c in cohort["creatives"] if c]
        _finish_fields(cohort)
        if not cohort.get("title"):
            cohort["title"] = f"Cohort {index}"

    return cohorts


def parse_cohort_response(text: str) -> ParsedCohorts:
    """
    Parse a cohort generation reply.

    Args:
        text (str): Raw reply text from the LLM

    Returns:
        ParsedCohorts: The cohorts and the parse mode that produced them

    Raises:
        LLMParsingError: If the reply is empty or holds an empty cohort list
    """
    if not text or not text.strip():
        error_msg = "Empty LLM response received"
        logger.error(error_msg)
        raise LLMParsingError(error_msg)

    logger.debug(f"Attempting to parse LLM response: {text[:100]}...")

    data = _load_json(text)
    if data is not None:
        cohorts = _cohorts_from_json(data)
        if cohorts == []:
            error_msg = "LLM response contained an empty cohort list"
            logger.error(error_msg)
            raise LLMParsingError(error_msg)
        if cohorts:
            logger.info(f"Parsed {len(cohorts)} cohorts from JSON response")
            return ParsedCohorts(cohorts, PARSE_MODE_JSON)
        logger.warning("JSON response contained no cohorts, trying text patterns")

    cohorts = _cohorts_from_text(text)
    if cohorts:
        logger.info(f"Parsed {len(cohorts)} cohorts from text response")
        return ParsedCohorts(cohorts, PARSE_MODE_TEXT)

    logger.warning("Could not find cohorts in LLM response, keeping raw text as a single cohort")
    return ParsedCohorts(
        [{"title": RAW_COHORT_TITLE, "description": text.strip(), "creatives": []}],
        PARSE_MODE_RAW
    )


def _creative_from_text(text: str) -> Dict[str, Any]:
    creative: Dict[str, Any] = {}
    field = None

    for raw_line in text.splitlines():
        line = _clean_line(raw_line)
        if not line:
            continue

        label = LABEL_PATTERN.match(line)
        if label:
            field = TEXT_LABELS[label.group(1).lower()]
            if field in CREATIVE_FIELDS:
                _append(creative, field, label.group(2).strip())
            else:
                field = None
            continue

        if field:
            _append(creative, field, line)

    return _finish_fields(creative)


def parse_creative_response(text: str) -> Dict[str, Any]:
    """
    Parse a single-creative reply.

    Args:
        text (str): Raw reply text from the LLM

    Returns:
        Dict[str, Any]: Creative with headline, description, cta and image_prompt

    Raises:
        LLMParsingError: If no headline can be found
    """
    if not text or not text.strip():
        error_msg = "Empty LLM response received"
        logger.error(error_msg)
        raise LLMParsingError(error_msg)

    creative = None
    data = _load_json(text)
    if isinstance(data, list) and data and isinstance(data[0], dict):
        data = data[0]
    if isinstance(data, dict):
        creative = normalize_keys(data)
        nested = creative.pop("creatives", None)
        if not creative.get("headline") and nested:
            creative = nested[0]

    if not creative or not creative.get("headline"):
        logger.debug("No creative in JSON response, trying text labels")
        creative = _creative_from_text(text)

    if not creative.get("headline"):
        error_msg = "LLM response did not contain a creative headline"
        logger.error(f"{error_msg}: {text[:200]}")
        raise LLMParsingError(error_msg)

    logger.info("Successfully parsed creative from LLM response")
    return creative
