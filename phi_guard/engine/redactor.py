# phi_guard/engine/redactor.py

"""Redaction engine that rewrites detected PHI spans."""

import hashlib
import logging
from typing import Any, Iterable, List, Optional, Sequence

from phi_guard.core.domain import PHIMatch, RedactionOptions, RedactionResult
from phi_guard.engine.detector import PHIDetector

logger = logging.getLogger(__name__)

PREVIEW_REDACTION_CHAR = "█"
PREVIEW_ELLIPSIS = "..."

# Fixed preset for previews; callers cannot override it.
SAFE_PREVIEW_OPTIONS = RedactionOptions(
    redaction_char=PREVIEW_REDACTION_CHAR,
    preserve_length=False,
    show_partial=False,
    use_hash=False,
)


class PHIRedactor:
    """Replaces PHI spans found by the detector.

    Args:
        detector: Detector to use. A detector over the bundled registry is
            created when omitted.
        default_options: Options used when a call does not supply its own.
    """

    def __init__(
        self,
        detector: Optional[PHIDetector] = None,
        default_options: Optional[RedactionOptions] = None,
    ) -> None:
        self.detector = detector or PHIDetector()
        self.default_options = default_options or RedactionOptions()

    def redact(
        self, text: Any, options: Optional[RedactionOptions] = None
    ) -> RedactionResult:
        """Redacts every detected PHI span in the text.

        Args:
            text: Input text. Non-string input is treated as empty.
            options: Replacement strategy; defaults to the redactor defaults.

        Returns:
            RedactionResult with matches in ascending position order.
        """
        text = text if isinstance(text, str) else ""
        return self._apply(text, self.detector.detect(text), options)

    def redact_by_type(
        self,
        text: Any,
        allowed_types: Iterable[str],
        options: Optional[RedactionOptions] = None,
    ) -> RedactionResult:
        """Redacts only matches whose pattern name is in allowed_types.

        Matches of other types are left in the text and omitted from the
        result.
        """
        text = text if isinstance(text, str) else ""
        allowed = set(allowed_types)
        matches = [m for m in self.detector.detect(text) if m.type in allowed]
        return self._apply(text, matches, options)

    def redact_batch(
        self, texts: Sequence[Any], options: Optional[RedactionOptions] = None
    ) -> List[RedactionResult]:
        """Redacts each text independently, preserving input order."""
        return [self.redact(text, options) for text in texts]

    def create_safe_preview(self, text: Any, max_length: int = 200) -> str:
        """Builds a length-bounded preview with every PHI span bracketed out.

        Returns:
            Redacted text truncated to max_length characters, with an ellipsis
            appended when truncated.
        """
        redacted = self.redact(text, SAFE_PREVIEW_OPTIONS).redacted_text

        if len(redacted) > max_length:
            return redacted[:max_length] + PREVIEW_ELLIPSIS
        return redacted

    @staticmethod
    def generate_replacement(value: str, options: RedactionOptions) -> str:
        """Computes the replacement for one matched value.

        Exactly one strategy applies, in priority order: hash, partial
        reveal, length-preserving mask, bracketed placeholder.
        """
        if options.use_hash:
            digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:8]
            return f"{options.hash_prefix}{digest}"

        keep = options.partial_chars
        if options.show_partial and len(value) > keep * 2:
            middle = options.redaction_char * (len(value) - keep * 2)
            return f"{value[:keep]}{middle}{value[len(value) - keep:]}"

        if options.preserve_length:
            return options.redaction_char * len(value)

        return f"[{options.redaction_char}REDACTED{options.redaction_char}]"

    def _apply(
        self,
        text: str,
        matches: List[PHIMatch],
        options: Optional[RedactionOptions],
    ) -> RedactionResult:
        if not matches:
            return RedactionResult(
                redacted_text=text,
                matches=[],
                redaction_count=0,
                original_length=len(text),
                redacted_length=len(text),
            )

        opts = options or self.default_options

        # Overlapping matches form one covered region, replaced as a whole.
        regions: List[List[int]] = []
        for m in matches:
            if regions and m.start_index < regions[-1][1]:
                regions[-1][1] = max(regions[-1][1], m.end_index)
            else:
                regions.append([m.start_index, m.end_index])

        # Single pass from the end of the original text.
        pieces: List[str] = []
        cursor = len(text)
        for start, end in reversed(regions):
            pieces.append(text[end:cursor])
            pieces.append(self.generate_replacement(text[start:end], opts))
            cursor = start
        pieces.append(text[:cursor])
        redacted = "".join(reversed(pieces))

        logger.debug(
            "Redaction applied",
            extra={
                "redaction_count": len(matches),
                "original_length": len(text),
                "redacted_length": len(redacted),
            },
        )

        return RedactionResult(
            redacted_text=redacted,
            matches=list(matches),
            redaction_count=len(matches),
            original_length=len(text),
            redacted_length=len(redacted),
        )
