"""Severity classification for reported crime types."""

from enum import Enum
from typing import Dict, Iterable, Optional


class Severity(str, Enum):
    RED = "red"
    YELLOW = "yellow"


def normalize_crime_type(crime_type: str) -> str:
    """Lower-case and collapse whitespace so 'Violent  Assault' == 'violent assault'."""
    return " ".join((crime_type or "").split()).lower()


class SeverityClassifier:
    """
    Static mapping from normalized crime type to severity.

    Red categories win over yellow ones when a type is listed in both.
    Unknown types fall back to the default severity rather than failing.
    """

    def __init__(
        self,
        red_types: Iterable[str],
        yellow_types: Iterable[str],
        default: Severity = Severity.YELLOW,
    ):
        self.default = default
        self._table: Dict[str, Severity] = {}
        # Yellow first so red entries overwrite duplicates
        for crime_type in yellow_types:
            self._table[normalize_crime_type(crime_type)] = Severity.YELLOW
        for crime_type in red_types:
            self._table[normalize_crime_type(crime_type)] = Severity.RED

    def classify(self, crime_type: str) -> Severity:
        return self._table.get(normalize_crime_type(crime_type), self.default)

    @classmethod
    def from_settings(cls, settings=None) -> "SeverityClassifier":
        if settings is None:
            from streetsafety.core.config import get_settings

            settings = get_settings()
        return cls(settings.red_severity_types, settings.yellow_severity_types)


_classifier: Optional[SeverityClassifier] = None


def get_severity_classifier() -> SeverityClassifier:
    """
    Get the singleton classifier built from settings.

    Returns:
        SeverityClassifier instance
    """
    global _classifier
    if _classifier is None:
        _classifier = SeverityClassifier.from_settings()
    return _classifier


def classify(crime_type: str) -> Severity:
    """Classify a crime type with the configured categories."""
    return get_severity_classifier().classify(crime_type)
