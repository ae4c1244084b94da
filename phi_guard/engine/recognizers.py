# phi_guard/engine/recognizers.py

"""Presidio recognizers built from the PHI pattern registry."""

import logging
from typing import List, Optional

import regex
from presidio_analyzer import Pattern, PatternRecognizer, RecognizerResult

from phi_guard.core.definitions import CONFIDENCE_SCORES
from phi_guard.core.domain import PHIMatch, PHIPattern
from phi_guard.core.loader import PatternLoader

logger = logging.getLogger(__name__)

# Presidio compiles with the `regex` module, so the flag must come from it too.
# Registry expressions are written for ASCII word boundaries and digits.
REGEX_FLAGS = regex.ASCII


class PHIPatternRecognizer(PatternRecognizer):
    """Single-pattern recognizer for one registry entry.

    Each registry entry gets its own recognizer so that matches from
    different patterns are never merged or deduplicated against each other.
    """

    def __init__(self, phi_pattern: PHIPattern):
        self.phi_pattern = phi_pattern

        super().__init__(
            supported_entity=phi_pattern.name,
            name=f"{phi_pattern.name}_Recognizer",
            patterns=[
                Pattern(
                    name=phi_pattern.name,
                    regex=phi_pattern.regex,
                    score=CONFIDENCE_SCORES[phi_pattern.confidence],
                )
            ],
            global_regex_flags=REGEX_FLAGS,
        )

    def scan(self, text: str) -> List[PHIMatch]:
        """Returns every non-overlapping match of this pattern, by position."""
        results: List[RecognizerResult] = self.analyze(
            text=text, entities=[self.phi_pattern.name], regex_flags=REGEX_FLAGS
        )
        return [
            self._to_match(text, r) for r in sorted(results, key=lambda r: r.start)
        ]

    def _to_match(self, text: str, result: RecognizerResult) -> PHIMatch:
        return PHIMatch(
            type=self.phi_pattern.name,
            value=text[result.start : result.end],
            start_index=result.start,
            end_index=result.end,
            confidence=self.phi_pattern.confidence,
            category=self.phi_pattern.category,
        )


def create_all_recognizers(
    loader: Optional[PatternLoader] = None,
) -> List[PHIPatternRecognizer]:
    """Creates one recognizer per registered pattern, in registration order."""
    loader = loader or PatternLoader.get_instance()

    recognizers = [PHIPatternRecognizer(p) for p in loader.get_patterns()]

    logger.debug(
        "Created PHI recognizers", extra={"recognizer_count": len(recognizers)}
    )
    return recognizers
