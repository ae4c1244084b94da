# phi_guard/audit/logger.py

"""Queryable, size-bounded audit log for PHI handling events."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Sequence

from phi_guard.audit import export
from phi_guard.audit.compliance import compute_metrics, derive_compliance_flags
from phi_guard.audit.events import (
    AuditEvent,
    ClientContext,
    ComplianceMetrics,
    DateRange,
    Details,
    EventFilter,
    FileOperationDetails,
    PHIDetectionDetails,
    PHIRedactionDetails,
    generate_event_id,
    utc_now,
)
from phi_guard.audit.storage import AuditStorage
from phi_guard.core.definitions import AuditAction, Confidence, ResourceType, RiskLevel
from phi_guard.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_EVENTS = 10000

SEARCHABLE_FIELDS = frozenset(
    {
        "id",
        "user_id",
        "action",
        "resource_type",
        "resource_id",
        "risk_level",
        "compliance_flags",
        "ip_address",
        "user_agent",
    }
)

AlertHandler = Callable[[AuditEvent], None]


def log_high_risk_event(event: AuditEvent) -> None:
    """Default alert handler: emits a warning for the security team."""
    logger.warning(
        "High-risk audit event detected",
        extra={
            "event_id": event.id,
            "action": event.action,
            "risk_level": event.risk_level,
            "user_id": event.user_id,
            "resource_id": event.resource_id,
        },
    )


class AuditLogger:
    """Write-once audit trail with an in-memory window and durable storage.

    Events are kept newest-first in memory, capped at max_events. Each event
    is also handed to the storage collaborator on a background worker;
    storage keeps its own, smaller cap. Persistence and high-risk alerts are
    best-effort and never fail a log() call.

    Args:
        storage: Durable storage collaborator
        max_events: In-memory capacity
        alert_handler: Called for high and critical events
        client_context: Default address and agent stamped on events
    """

    def __init__(
        self,
        storage: AuditStorage,
        max_events: int = DEFAULT_MAX_EVENTS,
        alert_handler: Optional[AlertHandler] = None,
        client_context: Optional[ClientContext] = None,
    ) -> None:
        if max_events < 1:
            raise ValidationError("max_events must be at least 1")

        self.storage = storage
        self.max_events = max_events
        self.alert_handler = alert_handler or log_high_risk_event
        self.client_context = client_context or ClientContext()

        self._events: List[AuditEvent] = []
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: List[Future] = []

    # Lifecycle

    def init(self) -> "AuditLogger":
        """Starts the persistence worker and rehydrates from storage."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="audit-persist"
            )

        try:
            stored = list(self.storage.load_all())
        except Exception:
            logger.warning("Failed to load persisted audit events", exc_info=True)
            stored = []

        with self._lock:
            self._events = stored[: self.max_events]

        logger.info("Audit logger initialised", extra={"event_count": len(stored)})
        return self

    def flush(self) -> None:
        """Blocks until all submitted persistence and alert tasks finish."""
        with self._lock:
            pending, self._pending = self._pending, []
        for future in pending:
            future.result()

    def close(self) -> None:
        """Drains pending work and stops the persistence worker."""
        if self._executor is None:
            return
        self.flush()
        self._executor.shutdown(wait=True)
        self._executor = None
        logger.info("Audit logger closed")

    def __enter__(self) -> "AuditLogger":
        return self.init()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Recording

    def log(
        self,
        user_id: str,
        action: str,
        resource_type: str,
        resource_id: str,
        details: Optional[Details] = None,
        risk_level: str = RiskLevel.LOW,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditEvent:
        """Records a new audit event.

        The in-memory insert completes before this returns; persistence and,
        for high or critical risk, alerting run afterwards on the worker.

        Raises:
            ValidationError: If action, resource_type, or risk_level is not a
                known value.
        """
        if action not in AuditAction.ALL:
            raise ValidationError(f"Unknown audit action: {action!r}")
        if resource_type not in ResourceType.ALL:
            raise ValidationError(f"Unknown resource type: {resource_type!r}")
        if risk_level not in RiskLevel.EVENT_LEVELS:
            raise ValidationError(f"Unknown risk level: {risk_level!r}")

        details = dict(details or {})
        event = AuditEvent(
            id=generate_event_id(),
            timestamp=utc_now(),
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details,
            risk_level=risk_level,
            compliance_flags=derive_compliance_flags(action, details, risk_level),
            ip_address=ip_address or self.client_context.ip_address,
            user_agent=user_agent or self.client_context.user_agent,
        )

        with self._lock:
            self._events.insert(0, event)
            del self._events[self.max_events :]

        self._submit(self._persist, event)

        if risk_level in RiskLevel.ELEVATED:
            self._submit(self._alert, event)

        logger.debug(
            "Audit event logged",
            extra={"event_id": event.id, "action": action, "risk_level": risk_level},
        )
        return event

    def log_phi_detection(
        self,
        user_id: str,
        resource_id: str,
        phi_types: Sequence[str],
        confidence: str,
        match_count: int,
    ) -> AuditEvent:
        details: PHIDetectionDetails = {
            "phi_types": list(phi_types),
            "confidence": confidence,
            "match_count": match_count,
            "detection_method": "automated_scan",
        }
        return self.log(
            user_id,
            AuditAction.PHI_DETECTED,
            ResourceType.DATA,
            resource_id,
            details,
            RiskLevel.HIGH if confidence == Confidence.HIGH else RiskLevel.MEDIUM,
        )

    def log_phi_redaction(
        self,
        user_id: str,
        resource_id: str,
        redaction_count: int,
        redaction_method: str,
    ) -> AuditEvent:
        details: PHIRedactionDetails = {
            "redaction_count": redaction_count,
            "redaction_method": redaction_method,
            "timestamp": utc_now().isoformat(),
        }
        return self.log(
            user_id,
            AuditAction.PHI_REDACTED,
            ResourceType.DATA,
            resource_id,
            details,
            RiskLevel.MEDIUM,
        )

    def log_file_operation(
        self,
        user_id: str,
        action: str,
        file_name: str,
        file_size: int,
        file_type: str,
    ) -> AuditEvent:
        if action not in AuditAction.FILE_OPERATIONS:
            raise ValidationError(f"Not a file operation: {action!r}")

        details: FileOperationDetails = {
            "file_size": file_size,
            "file_type": file_type,
            "file_name": file_name,
        }
        return self.log(
            user_id, action, ResourceType.FILE, file_name, details, RiskLevel.LOW
        )

    # Queries

    def get_events(self, event_filter: Optional[EventFilter] = None) -> List[AuditEvent]:
        """Returns in-memory events, newest first, narrowed by the filter."""
        with self._lock:
            events = list(self._events)

        if event_filter is None:
            return events

        f = event_filter
        if f.user_id:
            events = [e for e in events if e.user_id == f.user_id]
        if f.action:
            events = [e for e in events if e.action == f.action]
        if f.risk_level:
            events = [e for e in events if e.risk_level == f.risk_level]
        if f.date_range:
            events = [e for e in events if f.date_range.contains(e.timestamp)]
        if f.limit is not None:
            events = events[: max(f.limit, 0)]

        return events

    def get_compliance_metrics(
        self, date_range: Optional[DateRange] = None
    ) -> ComplianceMetrics:
        """Aggregates metrics over all events, or over those within date_range."""
        events = self.get_events(EventFilter(date_range=date_range))
        return compute_metrics(events, date_range)

    def search_logs(
        self, query: str, fields: Iterable[str] = ("action", "resource_id")
    ) -> List[AuditEvent]:
        """Case-insensitive substring search over string or list-of-string fields.

        Raises:
            ValidationError: If a field is not searchable.
        """
        fields = list(fields)
        unknown = [name for name in fields if name not in SEARCHABLE_FIELDS]
        if unknown:
            raise ValidationError(f"Fields are not searchable: {unknown}")

        needle = query.lower()

        def matches(value) -> bool:
            if isinstance(value, str):
                return needle in value.lower()
            if isinstance(value, (list, tuple)):
                return any(isinstance(v, str) and needle in v.lower() for v in value)
            return False

        return [
            event
            for event in self.get_events()
            if any(matches(getattr(event, name)) for name in fields)
        ]

    def export_audit_log(
        self, fmt: str = "json", event_filter: Optional[EventFilter] = None
    ) -> str:
        """Serialises the filtered events as JSON or CSV."""
        return export.render(self.get_events(event_filter), fmt)

    def __len__(self) -> int:
        return len(self._events)

    # Background work

    def _submit(self, fn: Callable[[AuditEvent], None], event: AuditEvent) -> None:
        if self._executor is None:
            # Not started: run inline.
            fn(event)
            return

        future = self._executor.submit(fn, event)
        with self._lock:
            self._pending = [p for p in self._pending if not p.done()]
            self._pending.append(future)

    def _persist(self, event: AuditEvent) -> None:
        try:
            self.storage.persist(event)
        except Exception:
            logger.warning(
                "Failed to persist audit event",
                exc_info=True,
                extra={"event_id": event.id},
            )

    def _alert(self, event: AuditEvent) -> None:
        try:
            self.alert_handler(event)
        except Exception:
            logger.warning(
                "High-risk alert handler failed",
                exc_info=True,
                extra={"event_id": event.id},
            )
