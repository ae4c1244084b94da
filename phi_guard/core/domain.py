# phi_guard/core/domain.py

"""Domain models for detection and redaction results."""

from dataclasses import dataclass, field
from typing import Dict, List

from phi_guard.core.definitions import Confidence
from phi_guard.core.exceptions import ValidationError


@dataclass(frozen=True)
class PHIPattern:
    """A named detection rule from the pattern registry.

    Attributes:
        name: Unique identifier of the rule (e.g., SSN, Email)
        regex: Regular expression source
        confidence: Certainty tier (high, medium, low)
        category: Free-form classification (e.g., identifier, contact)
    """

    name: str
    regex: str
    confidence: str
    category: str


@dataclass(frozen=True)
class PHIMatch:
    """A single occurrence of a pattern within a scanned text.

    Attributes:
        type: Name of the pattern that produced the match
        value: Exact matched substring
        start_index: Starting character offset in the source text
        end_index: Half-open ending character offset
        confidence: Confidence tier of the producing pattern
        category: Category of the producing pattern
    """

    type: str
    value: str
    start_index: int
    end_index: int
    confidence: str
    category: str


@dataclass(frozen=True)
class RedactionOptions:
    """Replacement strategy configuration for the redactor.

    Strategies are applied in priority order: hash, partial reveal,
    length-preserving mask, and finally a fixed bracketed placeholder.
    """

    redaction_char: str = "*"
    preserve_length: bool = True
    show_partial: bool = False
    partial_chars: int = 2
    use_hash: bool = False
    hash_prefix: str = "HASH_"

    def __post_init__(self) -> None:
        if not isinstance(self.redaction_char, str) or len(self.redaction_char) != 1:
            raise ValidationError("redaction_char must be a single character")
        if self.partial_chars < 0:
            raise ValidationError("partial_chars cannot be negative")


@dataclass
class RedactionResult:
    """Result object returned by the redactor.

    Attributes:
        redacted_text: Text with PHI spans replaced
        matches: Redacted matches in ascending position order
        redaction_count: Number of spans replaced
        original_length: Length of the input text
        redacted_length: Length of the output text
    """

    redacted_text: str
    matches: List[PHIMatch] = field(default_factory=list)
    redaction_count: int = 0
    original_length: int = 0
    redacted_length: int = 0


@dataclass
class RiskAssessment:
    """Aggregate risk classification of a scanned text."""

    risk_level: str
    phi_count: int
    categories: List[str] = field(default_factory=list)
    high_confidence_count: int = 0


@dataclass
class PHISummary:
    """Match counts broken down by pattern name, category, and confidence."""

    total_matches: int
    by_type: Dict[str, int] = field(default_factory=dict)
    by_category: Dict[str, int] = field(default_factory=dict)
    by_confidence: Dict[str, int] = field(
        default_factory=lambda: {
            Confidence.HIGH: 0,
            Confidence.MEDIUM: 0,
            Confidence.LOW: 0,
        }
    )
