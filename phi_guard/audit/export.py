# phi_guard/audit/export.py

"""Serialisation of audit events for compliance reporting."""

import csv
import io
import json
from typing import Sequence

from phi_guard.audit.events import AuditEvent
from phi_guard.core.exceptions import ValidationError

CSV_HEADERS = [
    "ID",
    "Timestamp",
    "User ID",
    "Action",
    "Resource Type",
    "Resource ID",
    "Risk Level",
    "Compliance Flags",
    "IP Address",
]

EXPORT_FORMATS = ("json", "csv")


def to_json(events: Sequence[AuditEvent]) -> str:
    """Dumps full event objects as an indented JSON array."""
    return json.dumps([e.to_dict() for e in events], indent=2)


def to_csv(events: Sequence[AuditEvent]) -> str:
    """Renders events as a CSV table with every field quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(CSV_HEADERS)
    for event in events:
        writer.writerow(
            [
                event.id,
                event.timestamp.isoformat(),
                event.user_id,
                event.action,
                event.resource_type,
                event.resource_id,
                event.risk_level,
                ";".join(event.compliance_flags),
                event.ip_address or "",
            ]
        )

    return buffer.getvalue().rstrip("\n")


def render(events: Sequence[AuditEvent], fmt: str = "json") -> str:
    """Serialises events in the requested format.

    Raises:
        ValidationError: If the format is not json or csv.
    """
    fmt = fmt.lower()
    if fmt == "csv":
        return to_csv(events)
    if fmt == "json":
        return to_json(events)
    raise ValidationError(f"Unsupported export format {fmt!r}; use one of {EXPORT_FORMATS}")
