"""
Do-not-use phrase checker for generated copy.

Brand guidelines carry a free-text list of phrases the brand never uses. The
checker reports every occurrence in generated creatives so the generators can
warn about them. Issues are advisory and never block persistence.
"""

import re
from typing import Dict, Any, List, Optional

from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

# Creative fields that are checked
CHECKED_FIELDS = ["headline", "description", "cta", "image_prompt"]

class ComplianceIssue:
    """
    Represents a banned phrase found in generated copy.
    """

    def __init__(self, phrase: str, location: str, context: str):
        """
        Initialize a compliance issue.

        Args:
            phrase: The banned phrase found.
            location: Where the phrase was found, e.g. "creative.headline".
            context: The text surrounding the match.
        """
        self.phrase = phrase
        self.location = location
        self.context = context

    def to_dict(self) -> Dict[str, str]:
        return {"phrase": self.phrase, "location": self.location, "context": self.context}

    def __str__(self) -> str:
        return f"Banned phrase '{self.phrase}' found in {self.location}: {self.context}"


class PhraseChecker:
    """
    Checks text for a brand's do-not-use phrases.
    """

    def __init__(self, banned_phrases: Optional[List[str]] = None):
        """
        Initialize the checker.

        Args:
            banned_phrases: Phrases to look for. Matching is case-insensitive on word boundaries.
        """
        self.banned_phrases = [phrase for phrase in (banned_phrases or []) if phrase and phrase.strip()]
        logger.debug(f"Initialized PhraseChecker with {len(self.banned_phrases)} banned phrases")

    def check_text(self, text: Optional[str], location: str) -> List[ComplianceIssue]:
        """
        Check a text string for banned phrases.

        Args:
            text: The text to check.
            location: Label for where the text came from.

        Returns:
            List of compliance issues found.
        """
        issues = []
        if not text or not isinstance(text, str):
            return issues

        text_lower = text.lower()

        for phrase in self.banned_phrases:
            pattern = r'\b' + re.escape(phrase.strip().lower()) + r'\b'

            for match in re.finditer(pattern, text_lower):
                # Up to 40 chars either side of the match
                start = max(0, match.start() - 40)
                end = min(len(text), match.end() + 40)
                context = text[start:end]

                if start > 0:
                    context = "..." + context
                if end < len(text):
                    context = context + "..."

                issues.append(ComplianceIssue(phrase.strip(), location, context))

        return issues

    def check_creative(self, creative: Dict[str, Any], prefix: str = "creative") -> List[ComplianceIssue]:
        """
        Check every copy field of a creative.

        Args:
            creative: Creative row or parsed creative.
            prefix: Location prefix used in reported issues.

        Returns:
            List of compliance issues found.
        """
        issues = []
        for field in CHECKED_FIELDS:
            issues.extend(self.check_text(creative.get(field), f"{prefix}.{field}"))

        for issue in issues:
            logger.warning(str(issue))

        return issues
