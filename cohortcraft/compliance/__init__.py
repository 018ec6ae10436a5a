"""
Compliance checks for generated campaign copy.
"""

from cohortcraft.compliance.phrase_checker import PhraseChecker, ComplianceIssue
