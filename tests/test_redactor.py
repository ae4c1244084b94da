"""
Tests for the PHI redaction engine.
"""

import hashlib

import pytest

from phi_guard.core.domain import RedactionOptions
from phi_guard.core.exceptions import ValidationError

# ============================================
# Replacement Strategy Tests
# ============================================


class TestReplacementStrategies:
    """Tests for generate_replacement() priority and output."""

    @pytest.mark.unit
    def test_preserve_length_masks_every_character(self, redactor):
        result = redactor.redact(
            "SSN: 123-45-6789", RedactionOptions(preserve_length=True, redaction_char="*")
        )

        assert result.redacted_text == "SSN: ***********"
        assert result.redaction_count == 1
        assert result.original_length == result.redacted_length == 16

    @pytest.mark.unit
    def test_custom_redaction_char(self, redactor):
        result = redactor.redact("SSN: 123-45-6789", RedactionOptions(redaction_char="#"))
        assert result.redacted_text == "SSN: ###########"

    @pytest.mark.unit
    def test_hash_replacement(self, redactor):
        digest = hashlib.sha256(b"123-45-6789").hexdigest()[:8]
        result = redactor.redact("SSN: 123-45-6789", RedactionOptions(use_hash=True))

        assert result.redacted_text == f"SSN: HASH_{digest}"

    @pytest.mark.unit
    def test_hash_is_deterministic_with_custom_prefix(self, redactor):
        options = RedactionOptions(use_hash=True, hash_prefix="ID_")
        first = redactor.redact("SSN: 123-45-6789", options).redacted_text
        second = redactor.redact("SSN: 123-45-6789", options).redacted_text

        assert first == second
        assert first.startswith("SSN: ID_")
        assert len(first) == len("SSN: ID_") + 8

    @pytest.mark.unit
    def test_partial_reveal(self, redactor):
        result = redactor.redact("SSN: 123-45-6789", RedactionOptions(show_partial=True))
        assert result.redacted_text == "SSN: 12*******89"

    @pytest.mark.unit
    def test_partial_falls_back_when_value_too_short(self, redactor):
        options = RedactionOptions(show_partial=True, partial_chars=6)
        result = redactor.redact("SSN: 123-45-6789", options)

        assert result.redacted_text == "SSN: ***********"

    @pytest.mark.unit
    def test_placeholder_when_not_preserving_length(self, redactor):
        result = redactor.redact("SSN: 123-45-6789", RedactionOptions(preserve_length=False))
        assert result.redacted_text == "SSN: [*REDACTED*]"

    @pytest.mark.unit
    def test_hash_wins_over_partial(self, redactor):
        options = RedactionOptions(use_hash=True, show_partial=True)
        result = redactor.redact("SSN: 123-45-6789", options)

        assert result.redacted_text.startswith("SSN: HASH_")

    @pytest.mark.unit
    @pytest.mark.parametrize("char", ["", "**"])
    def test_rejects_invalid_redaction_char(self, char):
        with pytest.raises(ValidationError):
            RedactionOptions(redaction_char=char)

    @pytest.mark.unit
    def test_rejects_negative_partial_chars(self):
        with pytest.raises(ValidationError):
            RedactionOptions(partial_chars=-1)


# ============================================
# Redaction Tests
# ============================================


class TestRedact:
    """Tests for redact() over whole texts."""

    @pytest.mark.unit
    def test_no_phi_returns_text_unchanged(self, redactor):
        text = "Administer acetaminophen every 6 hours."
        result = redactor.redact(text)

        assert result.redacted_text == text
        assert result.matches == []
        assert result.redaction_count == 0

    @pytest.mark.unit
    def test_non_text_input_is_empty(self, redactor):
        result = redactor.redact(None)

        assert result.redacted_text == ""
        assert result.redaction_count == 0

    @pytest.mark.unit
    def test_default_options_preserve_length(self, redactor, sample_phi_text):
        result = redactor.redact(sample_phi_text)

        assert len(result.redacted_text) == len(sample_phi_text)
        assert "123-45-6789" not in result.redacted_text
        assert "john.doe@email.com" not in result.redacted_text

    @pytest.mark.unit
    def test_differing_lengths_keep_surrounding_text(self, redactor):
        text = "SSN: 123-45-6789, Email: jane@example.com"
        result = redactor.redact(text, RedactionOptions(preserve_length=False))

        assert result.redacted_text == "SSN: [*REDACTED*], Email: [*REDACTED*]"
        assert result.redacted_length == len(result.redacted_text)

    @pytest.mark.unit
    def test_matches_returned_in_ascending_order(self, redactor, detector, sample_phi_text):
        result = redactor.redact(sample_phi_text, RedactionOptions(use_hash=True))

        assert result.matches == detector.detect(sample_phi_text)
        assert result.redaction_count == len(result.matches)

    @pytest.mark.unit
    def test_overlapping_matches_are_both_redacted(self, redactor):
        text = "Medicare: 123-45-6789-A"
        result = redactor.redact(text)

        assert result.redaction_count == 2
        assert result.redacted_text == "Medicare: " + "*" * 13

    @pytest.mark.unit
    def test_overlapping_matches_share_one_placeholder(self, redactor):
        result = redactor.redact(
            "Medicare: 123-45-6789-A", RedactionOptions(preserve_length=False)
        )

        assert result.redacted_text == "Medicare: [*REDACTED*]"
        assert [m.type for m in result.matches] == ["SSN", "Medicare Number"]

    @pytest.mark.unit
    def test_nested_match_does_not_leak_outer_tail(self, redactor):
        # SSN sits inside the MRN value and starts after it.
        text = "MRN 123456789-ABCDEFG on file"
        result = redactor.redact(text, RedactionOptions(preserve_length=False))

        assert [m.type for m in result.matches] == [
            "Medical Record Number",
            "SSN",
        ]
        assert result.redacted_text == "[*REDACTED*] on file"

    @pytest.mark.unit
    def test_nested_match_keeps_length_when_masking(self, redactor):
        text = "MRN 123456789-ABCDEFG on file"
        result = redactor.redact(text)

        assert result.redacted_text == "*" * 21 + " on file"
        assert result.redacted_length == len(text)

    @pytest.mark.unit
    def test_nested_match_hash_covers_whole_region(self, redactor):
        digest = hashlib.sha256(b"MRN 123456789-ABCDEFG").hexdigest()[:8]
        result = redactor.redact(
            "MRN 123456789-ABCDEFG on file", RedactionOptions(use_hash=True)
        )

        assert result.redacted_text == f"HASH_{digest} on file"


class TestRedactVariants:
    """Tests for redact_by_type(), redact_batch(), and create_safe_preview()."""

    @pytest.mark.unit
    def test_redact_by_type_only_touches_allowed_types(self, redactor):
        text = "SSN: 123-45-6789, Email: jane@example.com"
        result = redactor.redact_by_type(text, ["Email"])

        assert result.redacted_text == "SSN: 123-45-6789, Email: " + "*" * 16
        assert result.redaction_count == 1
        assert [m.type for m in result.matches] == ["Email"]

    @pytest.mark.unit
    def test_redact_by_type_without_allowed_matches(self, redactor):
        text = "SSN: 123-45-6789"
        result = redactor.redact_by_type(text, ["Email"])

        assert result.redacted_text == text
        assert result.redaction_count == 0

    @pytest.mark.unit
    def test_redact_batch_preserves_order(self, redactor):
        texts = ["SSN: 123-45-6789", "nothing here", "mail: a@b.org"]
        results = redactor.redact_batch(texts)

        assert [r.redaction_count for r in results] == [1, 0, 1]
        assert results[1].redacted_text == "nothing here"
        assert results[2].redacted_text == "mail: *******"

    @pytest.mark.unit
    def test_safe_preview_uses_fixed_placeholder(self, redactor):
        preview = redactor.create_safe_preview("Patient SSN: 123-45-6789")
        assert preview == "Patient SSN: [█REDACTED█]"

    @pytest.mark.unit
    def test_safe_preview_ignores_redactor_defaults(self, detector):
        from phi_guard.engine.redactor import PHIRedactor

        hashing = PHIRedactor(detector, RedactionOptions(use_hash=True))
        preview = hashing.create_safe_preview("SSN: 123-45-6789")

        assert preview == "SSN: [█REDACTED█]"

    @pytest.mark.unit
    def test_safe_preview_contains_no_phi(self, redactor, detector):
        text = "Patient SSN: 123-45-6789, email jane@example.com, call 555-123-4567."
        preview = redactor.create_safe_preview(text)

        assert detector.detect(preview) == []
        for value in ["123-45-6789", "jane@example.com", "555-123-4567"]:
            assert value not in preview

    @pytest.mark.unit
    def test_safe_preview_with_nested_matches(self, redactor):
        preview = redactor.create_safe_preview("MRN 123456789-ABCDEFG")

        assert preview == "[█REDACTED█]"
        assert "EFG" not in preview

    @pytest.mark.unit
    def test_safe_preview_truncates(self, redactor):
        preview = redactor.create_safe_preview("x" * 300, max_length=200)

        assert len(preview) == 203
        assert preview.endswith("...")

    @pytest.mark.unit
    def test_safe_preview_short_text_not_truncated(self, redactor):
        assert redactor.create_safe_preview("short note", max_length=200) == "short note"
