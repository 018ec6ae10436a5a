"""
Brand guidelines validation and persistence.

Each user owns at most one brand guidelines row. The row conditions every
generation prompt; when a user has none, the prompt templates substitute
defaults.
"""

import re
from typing import Dict, Any, List, Optional

from cohortcraft.store.base import RowStore
from cohortcraft.core.constants import BRAND_GUIDELINES_TABLE
from cohortcraft.core.error_handler import ValidationError
from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

# Form field names accepted as aliases for column names
FORM_FIELD_MAP = {
    "brandName": "brand_name",
    "brandTone": "brand_tone",
    "brandVoice": "brand_voice",
    "primaryColor": "primary_color",
    "secondaryColor": "secondary_color",
    "sampleTagline": "sample_tagline",
    "doNotUse": "do_not_use_phrases",
    "logoUrl": "logo_url",
}

OPTIONAL_COLUMNS = ["brand_voice", "sample_tagline", "do_not_use_phrases", "logo_url"]

class BrandGuidelinesManager:
    """
    Validates and stores brand guidelines.
    """

    def __init__(self, store: RowStore):
        """
        Initialize the manager.

        Args:
            store (RowStore): Row store holding the brand_guidelines table
        """
        self.store = store

    @staticmethod
    def normalize(values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Map form field names to column names and blank optional values to None.

        Args:
            values (Dict[str, Any]): Form values or column values

        Returns:
            Dict[str, Any]: Column values
        """
        columns = {}
        for key, value in values.items():
            column = FORM_FIELD_MAP.get(key, key)
            if column not in FORM_FIELD_MAP.values():
                logger.debug(f"Ignoring unknown brand guidelines field: {key}")
                continue
            if isinstance(value, str):
                value = value.strip()
            columns[column] = value

        for column in OPTIONAL_COLUMNS:
            if column in columns and not columns[column]:
                columns[column] = None

        return columns

    def validate(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate brand guidelines values.

        Args:
            values (Dict[str, Any]): Form values or column values

        Returns:
            Dict[str, Any]: Normalized column values

        Raises:
            ValidationError: If a rule is violated
        """
        columns = self.normalize(values)

        brand_name = columns.get("brand_name") or ""
        if len(brand_name) < 2:
            raise ValidationError("Brand name must be at least 2 characters", field="brand_name", value=brand_name)

        if not columns.get("brand_tone"):
            raise ValidationError("Please select a brand tone", field="brand_tone")

        if not columns.get("primary_color"):
            raise ValidationError("Please select a primary color", field="primary_color")

        if not columns.get("secondary_color"):
            raise ValidationError("Please select a secondary color", field="secondary_color")

        return columns

    def save(self, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and save brand guidelines for a user, replacing any existing values.

        Args:
            user_id (str): Owner of the guidelines
            values (Dict[str, Any]): Form values or column values

        Returns:
            Dict[str, Any]: The stored row
        """
        if not user_id:
            raise ValidationError("Missing required parameters: user_id", field="user_id")

        columns = self.validate(values)
        existing = self.get(user_id)

        if existing:
            row = self.store.update(BRAND_GUIDELINES_TABLE, existing["id"], columns)
            logger.info(f"Updated brand guidelines for user {user_id}")
        else:
            columns["user_id"] = user_id
            row = self.store.insert(BRAND_GUIDELINES_TABLE, columns)
            logger.info(f"Saved brand guidelines for user {user_id}")

        return row

    def get(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Get a user's brand guidelines, or None if they have not saved any.
        """
        if not user_id:
            return None
        return self.store.find_one(BRAND_GUIDELINES_TABLE, user_id=user_id)

    def has_guidelines(self, user_id: str) -> bool:
        """
        Whether the user has completed their brand guidelines.
        """
        return self.get(user_id) is not None

    @staticmethod
    def banned_phrases(brand: Optional[Dict[str, Any]]) -> List[str]:
        """
        Split the free-text do-not-use field into individual phrases.

        Args:
            brand (Dict[str, Any], optional): Brand guidelines row

        Returns:
            List[str]: Phrases separated by commas, semicolons or newlines
        """
        if not brand or not brand.get("do_not_use_phrases"):
            return []
        parts = re.split(r"[,;\n]", brand["do_not_use_phrases"])
        return [part.strip().strip('"\'') for part in parts if part.strip().strip('"\'')]
