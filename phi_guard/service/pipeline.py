# phi_guard/service/pipeline.py

"""Scan workflow: detect, assess, redact, and report to the audit log."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from phi_guard.audit.events import ClientContext
from phi_guard.audit.logger import AuditLogger
from phi_guard.audit.storage import AuditStorage, InMemoryAuditStorage, JsonFileAuditStorage
from phi_guard.core.definitions import AuditAction, Confidence, RedactionMethod
from phi_guard.core.domain import PHISummary, RedactionOptions, RedactionResult, RiskAssessment
from phi_guard.core.exceptions import PHIGuardError, ValidationError
from phi_guard.core.loader import PatternLoader
from phi_guard.engine.detector import PHIDetector
from phi_guard.engine.redactor import PHIRedactor
from phi_guard.service.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

_METHOD_OPTIONS: Dict[str, RedactionOptions] = {
    RedactionMethod.MASK: RedactionOptions(preserve_length=True),
    RedactionMethod.PARTIAL: RedactionOptions(show_partial=True),
    RedactionMethod.HASH: RedactionOptions(use_hash=True),
    RedactionMethod.PLACEHOLDER: RedactionOptions(preserve_length=False),
}

# Highest tier first
_CONFIDENCE_ORDER = (Confidence.HIGH, Confidence.MEDIUM, Confidence.LOW)


@dataclass
class ScanReport:
    """Outcome of scanning one document.

    Attributes:
        resource_id: Identifier of the scanned resource
        risk: Aggregate risk of the original text
        summary: Match counts by type, category, and confidence
        redaction: Redacted text and the matches it replaced
        preview: Length-bounded safe preview of the text
        metadata: Processing information, including "error" on failure
    """

    resource_id: str
    risk: Optional[RiskAssessment] = None
    summary: Optional[PHISummary] = None
    redaction: Optional[RedactionResult] = None
    preview: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return "error" not in self.metadata


def options_for_method(method: str) -> RedactionOptions:
    """Maps a named redaction method to its options.

    Raises:
        ValidationError: If the method is unknown.
    """
    try:
        return _METHOD_OPTIONS[method]
    except KeyError:
        raise ValidationError(
            f"Unknown redaction method {method!r}; use one of {sorted(RedactionMethod.ALL)}"
        ) from None


def build_storage(config: Settings) -> AuditStorage:
    """Creates durable audit storage from settings."""
    if config.audit_store_path:
        return JsonFileAuditStorage(config.audit_store_path, config.max_stored_events)
    return InMemoryAuditStorage(config.max_stored_events)


def build_audit_logger(
    config: Optional[Settings] = None, storage: Optional[AuditStorage] = None
) -> AuditLogger:
    """Creates an audit logger wired to storage. Call init() before use."""
    config = config or default_settings
    return AuditLogger(
        storage=storage or build_storage(config),
        max_events=config.max_memory_events,
        client_context=ClientContext(
            ip_address=config.default_ip_address, user_agent=config.user_agent
        ),
    )


def build_detector(config: Optional[Settings] = None) -> PHIDetector:
    """Creates a detector over the configured pattern registry.

    Raises:
        ConfigurationError: If the pattern registry cannot be loaded.
    """
    config = config or default_settings
    if config.patterns_path:
        return PHIDetector(PatternLoader(config.patterns_path))
    return PHIDetector(PatternLoader.get_instance())


def strongest_confidence(confidences: Iterable[str]) -> str:
    """Returns the highest confidence tier present, or low if none."""
    present = set(confidences)
    for tier in _CONFIDENCE_ORDER:
        if tier in present:
            return tier
    return Confidence.LOW


class PHIScanService:
    """Upstream workflow that runs detection and redaction and reports both.

    Args:
        audit_logger: Initialised audit logger that receives outcomes
        detector: Detector to use; built from settings when omitted
        config: Settings; the module-level settings when omitted
    """

    def __init__(
        self,
        audit_logger: AuditLogger,
        detector: Optional[PHIDetector] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.config = config or default_settings
        self.audit_logger = audit_logger
        self.detector = detector or build_detector(self.config)
        self.redactor = PHIRedactor(self.detector)

    def scan(
        self,
        text: str,
        user_id: str,
        resource_id: str,
        method: Optional[str] = None,
        allowed_types: Optional[Iterable[str]] = None,
    ) -> ScanReport:
        """Scans and redacts one document, logging detection and redaction.

        Args:
            text: Document text
            user_id: Acting user, recorded on audit events
            resource_id: Identifier of the document
            method: Redaction method; the configured default when omitted
            allowed_types: Restrict redaction to these pattern names

        Returns:
            ScanReport. On failure the report carries an "error" entry in its
            metadata and the text is not returned.
        """
        method = method or self.config.default_redaction_method

        if not text or not isinstance(text, str):
            logger.warning("Empty or non-text input provided for scan")
            return ScanReport(
                resource_id=resource_id,
                metadata={"error": "Empty input provided", "status": "failed"},
            )

        try:
            options = options_for_method(method)

            logger.info(
                "Starting PHI scan",
                extra={"text_length": len(text), "method": method},
            )

            risk = self.detector.analyze_risk(text)
            summary = self.detector.get_summary(text)

            if allowed_types is not None:
                redaction = self.redactor.redact_by_type(text, allowed_types, options)
            else:
                redaction = self.redactor.redact(text, options)

            preview = self.redactor.create_safe_preview(
                text, self.config.preview_max_length
            )

        except PHIGuardError as e:
            logger.error(
                f"Known error during scan: {type(e).__name__}",
                exc_info=True,
                extra={"text_length": len(text)},
            )
            return ScanReport(
                resource_id=resource_id,
                metadata={
                    "error": "The scan service encountered a processing error.",
                    "status": "failed",
                    "error_type": type(e).__name__,
                },
            )

        if summary.total_matches:
            confidences = [c for c, n in summary.by_confidence.items() if n]
            self.audit_logger.log_phi_detection(
                user_id,
                resource_id,
                phi_types=list(summary.by_type),
                confidence=strongest_confidence(confidences),
                match_count=summary.total_matches,
            )

        if redaction.redaction_count:
            self.audit_logger.log_phi_redaction(
                user_id, resource_id, redaction.redaction_count, method
            )

        logger.info(
            "PHI scan completed",
            extra={
                "risk_level": risk.risk_level,
                "match_count": summary.total_matches,
                "redaction_count": redaction.redaction_count,
            },
        )

        return ScanReport(
            resource_id=resource_id,
            risk=risk,
            summary=summary,
            redaction=redaction,
            preview=preview,
            metadata={
                "method": method,
                "count": redaction.redaction_count,
                "entity_types": sorted(summary.by_type),
            },
        )

    def scan_upload(
        self,
        text: str,
        user_id: str,
        file_name: str,
        file_type: str,
        file_size: Optional[int] = None,
        method: Optional[str] = None,
    ) -> ScanReport:
        """Records a file upload, then scans its extracted text."""
        size = file_size if file_size is not None else len((text or "").encode("utf-8"))
        self.audit_logger.log_file_operation(
            user_id, AuditAction.FILE_UPLOADED, file_name, size, file_type.lower()
        )
        return self.scan(text, user_id, file_name, method=method)

