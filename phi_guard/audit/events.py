# phi_guard/audit/events.py

"""Audit event definitions and per-action detail payloads."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, TypedDict, Union

# Details are a flexible map of primitive values; the TypedDicts below
# document the expected keys for each action that carries a payload.
DetailValue = Union[str, int, float, bool, None, List[str], Tuple[str, ...]]
Details = Mapping[str, DetailValue]


class PHIDetectionDetails(TypedDict):
    """Payload for phi_detected events."""

    phi_types: List[str]
    confidence: str
    match_count: int
    detection_method: str


class PHIRedactionDetails(TypedDict):
    """Payload for phi_redacted events."""

    redaction_count: int
    redaction_method: str
    timestamp: str


class FileOperationDetails(TypedDict):
    """Payload for file_uploaded and file_downloaded events."""

    file_size: int
    file_type: str
    file_name: str


class DataExportDetails(TypedDict, total=False):
    """Payload for data_exported events."""

    contains_phi: bool
    format: str
    record_count: int


@dataclass(frozen=True)
class ClientContext:
    """Best-effort metadata about the originating client."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class AuditEvent:
    """A single write-once audit record.

    Attributes:
        id: Unique event identifier
        timestamp: UTC creation time
        user_id: Acting user
        action: One of AuditAction
        resource_type: One of ResourceType
        resource_id: Identifier of the affected resource
        details: Action-specific payload
        risk_level: One of RiskLevel.EVENT_LEVELS
        compliance_flags: Tags derived at creation time
        ip_address: Originating address, if known
        user_agent: Client agent string, if known
    """

    id: str
    timestamp: datetime
    user_id: str
    action: str
    resource_type: str
    resource_id: str
    details: Details = field(default_factory=dict)
    risk_level: str = "low"
    compliance_flags: Tuple[str, ...] = ()
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def __post_init__(self) -> None:
        # Read-only view; list values are stored as tuples.
        frozen = {
            key: tuple(value) if isinstance(value, (list, tuple)) else value
            for key, value in self.details.items()
        }
        object.__setattr__(self, "details", MappingProxyType(frozen))
        object.__setattr__(self, "compliance_flags", tuple(self.compliance_flags))

    def to_dict(self) -> Dict[str, Any]:
        """Returns a JSON-serialisable representation of the event."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "user_id": self.user_id,
            "action": self.action,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "details": {
                key: list(value) if isinstance(value, tuple) else value
                for key, value in self.details.items()
            },
            "risk_level": self.risk_level,
            "compliance_flags": list(self.compliance_flags),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEvent":
        """Rebuilds an event from its to_dict() representation."""
        timestamp = datetime.fromisoformat(data["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return cls(
            id=data["id"],
            timestamp=timestamp,
            user_id=data["user_id"],
            action=data["action"],
            resource_type=data["resource_type"],
            resource_id=data["resource_id"],
            details=dict(data.get("details") or {}),
            risk_level=data.get("risk_level", "low"),
            compliance_flags=tuple(data.get("compliance_flags") or ()),
            ip_address=data.get("ip_address"),
            user_agent=data.get("user_agent"),
        )


@dataclass(frozen=True)
class DateRange:
    """Inclusive time window."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        # Event timestamps are UTC; naive bounds are read as UTC.
        for name in ("start", "end"):
            moment = getattr(self, name)
            if moment.tzinfo is None:
                object.__setattr__(self, name, moment.replace(tzinfo=timezone.utc))

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class EventFilter:
    """Criteria for narrowing the in-memory event sequence.

    All criteria are optional and combined with AND. The limit keeps the
    newest N events and is applied after every other criterion.
    """

    user_id: Optional[str] = None
    action: Optional[str] = None
    risk_level: Optional[str] = None
    date_range: Optional[DateRange] = None
    limit: Optional[int] = None


@dataclass
class ComplianceMetrics:
    """Aggregate counts over a window of audit events."""

    total_events: int
    phi_detections: int
    redactions: int
    high_risk_events: int
    compliance_violations: int
    time_range: DateRange


def generate_event_id() -> str:
    """Returns an id of the form audit_<epoch-ms>_<random>."""
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"audit_{millis}_{uuid.uuid4().hex[:9]}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
