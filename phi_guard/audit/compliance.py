# phi_guard/audit/compliance.py

"""Compliance flag derivation and aggregate metrics for audit events."""

from typing import List, Mapping, Optional, Sequence, Tuple

from phi_guard.audit.events import (
    AuditEvent,
    ComplianceMetrics,
    DateRange,
    DetailValue,
    utc_now,
)
from phi_guard.core.definitions import (
    STRUCTURED_FILE_TYPES,
    AuditAction,
    ComplianceFlag,
    RiskLevel,
)

VIOLATION_MARKERS = ("violation", "breach")


def derive_compliance_flags(
    action: str, details: Mapping[str, DetailValue], risk_level: str
) -> Tuple[str, ...]:
    """Derives the compliance tags for a new event.

    The result depends only on the arguments and is computed once when the
    event is created.
    """
    flags: List[str] = []

    if action == AuditAction.PHI_DETECTED:
        flags.append(ComplianceFlag.HIPAA_PHI_DETECTION)
        if risk_level == RiskLevel.HIGH:
            flags.append(ComplianceFlag.HIPAA_HIGH_RISK_PHI)

    if action == AuditAction.PHI_REDACTED:
        flags.append(ComplianceFlag.HIPAA_PHI_REDACTION)

    if action == AuditAction.DATA_EXPORTED and details.get("contains_phi"):
        flags.append(ComplianceFlag.HIPAA_PHI_EXPORT)

    if action == AuditAction.PERMISSION_DENIED:
        flags.append(ComplianceFlag.ACCESS_CONTROL_VIOLATION)

    if (
        action == AuditAction.FILE_UPLOADED
        and details.get("file_type") in STRUCTURED_FILE_TYPES
    ):
        flags.append(ComplianceFlag.STRUCTURED_DATA_UPLOAD)

    return tuple(flags)


def is_violation(event: AuditEvent) -> bool:
    return any(
        marker in flag
        for flag in event.compliance_flags
        for marker in VIOLATION_MARKERS
    )


def compute_metrics(
    events: Sequence[AuditEvent], date_range: Optional[DateRange] = None
) -> ComplianceMetrics:
    """Aggregates counts over newest-first events.

    Args:
        events: Events to aggregate, newest first
        date_range: Window the events were selected with. When omitted, the
            observed oldest-to-newest span is reported, or "now" for both
            ends if there are no events.
    """
    if date_range is None:
        if events:
            date_range = DateRange(start=events[-1].timestamp, end=events[0].timestamp)
        else:
            now = utc_now()
            date_range = DateRange(start=now, end=now)

    return ComplianceMetrics(
        total_events=len(events),
        phi_detections=sum(1 for e in events if e.action == AuditAction.PHI_DETECTED),
        redactions=sum(1 for e in events if e.action == AuditAction.PHI_REDACTED),
        high_risk_events=sum(1 for e in events if e.risk_level in RiskLevel.ELEVATED),
        compliance_violations=sum(1 for e in events if is_violation(e)),
        time_range=date_range,
    )
