# phi_guard/engine/detector.py

"""Pattern-based PHI detector with risk and summary aggregation."""

import logging
from typing import Any, List, Optional

from phi_guard.core.definitions import Confidence, RiskLevel
from phi_guard.core.domain import PHIMatch, PHISummary, RiskAssessment
from phi_guard.core.loader import PatternLoader
from phi_guard.engine.recognizers import create_all_recognizers

logger = logging.getLogger(__name__)


class PHIDetector:
    """Scans text against the PHI pattern registry.

    Detection is a pure function of the input text and the read-only
    registry, so a single instance can be shared between callers.
    """

    def __init__(self, loader: Optional[PatternLoader] = None) -> None:
        self._recognizers = create_all_recognizers(loader)

    @property
    def pattern_names(self) -> List[str]:
        return [r.phi_pattern.name for r in self._recognizers]

    def detect(self, text: Any) -> List[PHIMatch]:
        """Finds all PHI matches in the text.

        Every pattern is applied to the full text independently; matches from
        different patterns may overlap and are all retained.

        Args:
            text: Input text to scan. Non-string or empty input yields no matches.

        Returns:
            Matches sorted ascending by start index. Matches sharing a start
            index keep pattern registration order.
        """
        if not text or not isinstance(text, str):
            return []

        matches: List[PHIMatch] = []
        for recognizer in self._recognizers:
            matches.extend(recognizer.scan(text))

        # sorted() is stable, which preserves registration order on ties
        matches = sorted(matches, key=lambda m: m.start_index)

        logger.debug(
            "PHI scan completed",
            extra={"text_length": len(text), "match_count": len(matches)},
        )
        return matches

    def analyze_risk(self, text: Any) -> RiskAssessment:
        """Classifies the aggregate PHI risk of a text.

        Returns:
            RiskAssessment with level none when nothing was found; high when
            there are 3+ high-confidence or 5+ total matches; medium when there
            is any high-confidence match or 2+ total matches; low otherwise.
            Two low-confidence matches therefore already score medium.
        """
        matches = self.detect(text)

        if not matches:
            return RiskAssessment(risk_level=RiskLevel.NONE, phi_count=0)

        high_confidence_count = sum(
            1 for m in matches if m.confidence == Confidence.HIGH
        )
        categories = list(dict.fromkeys(m.category for m in matches))
        phi_count = len(matches)

        if high_confidence_count >= 3 or phi_count >= 5:
            risk_level = RiskLevel.HIGH
        elif high_confidence_count >= 1 or phi_count >= 2:
            risk_level = RiskLevel.MEDIUM
        else:
            risk_level = RiskLevel.LOW

        return RiskAssessment(
            risk_level=risk_level,
            phi_count=phi_count,
            categories=categories,
            high_confidence_count=high_confidence_count,
        )

    def contains_phi(self, text: Any) -> bool:
        """Returns True if the text contains at least one PHI match."""
        return len(self.detect(text)) > 0

    def get_summary(self, text: Any) -> PHISummary:
        """Counts matches by pattern name, category, and confidence tier."""
        matches = self.detect(text)
        summary = PHISummary(total_matches=len(matches))

        for match in matches:
            summary.by_type[match.type] = summary.by_type.get(match.type, 0) + 1
            summary.by_category[match.category] = (
                summary.by_category.get(match.category, 0) + 1
            )
            summary.by_confidence[match.confidence] = (
                summary.by_confidence.get(match.confidence, 0) + 1
            )

        return summary
