# phi_guard/core/definitions.py

"""Vocabulary constants for PHI detection and audit events."""

from typing import Dict


class Confidence:
    """Detector certainty tiers attached to each pattern."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    ALL = frozenset({HIGH, MEDIUM, LOW})


# Presidio pattern scores for each confidence tier
CONFIDENCE_SCORES: Dict[str, float] = {
    Confidence.HIGH: 0.85,
    Confidence.MEDIUM: 0.6,
    Confidence.LOW: 0.3,
}


class RiskLevel:
    """Severity classification for audit events and text scans."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    # Levels that may be attached to an audit event
    EVENT_LEVELS = frozenset({LOW, MEDIUM, HIGH, CRITICAL})
    ELEVATED = frozenset({HIGH, CRITICAL})


class ResourceType:
    """Kinds of resources an audit event can refer to."""

    FILE = "file"
    DATA = "data"
    SYSTEM = "system"

    ALL = frozenset({FILE, DATA, SYSTEM})


class AuditAction:
    """Actions recorded by the audit logger."""

    PHI_DETECTED = "phi_detected"
    PHI_REDACTED = "phi_redacted"
    FILE_UPLOADED = "file_uploaded"
    FILE_DOWNLOADED = "file_downloaded"
    DATA_ACCESSED = "data_accessed"
    DATA_EXPORTED = "data_exported"
    COMPLIANCE_REPORT_GENERATED = "compliance_report_generated"
    SYSTEM_LOGIN = "system_login"
    SYSTEM_LOGOUT = "system_logout"
    PERMISSION_DENIED = "permission_denied"
    SECURITY_VIOLATION = "security_violation"

    ALL = frozenset(
        {
            PHI_DETECTED,
            PHI_REDACTED,
            FILE_UPLOADED,
            FILE_DOWNLOADED,
            DATA_ACCESSED,
            DATA_EXPORTED,
            COMPLIANCE_REPORT_GENERATED,
            SYSTEM_LOGIN,
            SYSTEM_LOGOUT,
            PERMISSION_DENIED,
            SECURITY_VIOLATION,
        }
    )
    FILE_OPERATIONS = frozenset({FILE_UPLOADED, FILE_DOWNLOADED})


class ComplianceFlag:
    """Tags attached to audit events for regulatory reporting."""

    HIPAA_PHI_DETECTION = "hipaa_phi_detection"
    HIPAA_HIGH_RISK_PHI = "hipaa_high_risk_phi"
    HIPAA_PHI_REDACTION = "hipaa_phi_redaction"
    HIPAA_PHI_EXPORT = "hipaa_phi_export"
    ACCESS_CONTROL_VIOLATION = "access_control_violation"
    STRUCTURED_DATA_UPLOAD = "structured_data_upload"


# File types that count as structured data uploads
STRUCTURED_FILE_TYPES = frozenset({"xlsx", "csv", "txt"})


class RedactionMethod:
    """Named redaction strategies offered by the scan service."""

    MASK = "mask"
    PARTIAL = "partial"
    HASH = "hash"
    PLACEHOLDER = "placeholder"

    ALL = frozenset({MASK, PARTIAL, HASH, PLACEHOLDER})
