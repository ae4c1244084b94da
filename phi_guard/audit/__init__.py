# phi_guard/audit/__init__.py

"""Audit logging for detection, redaction, and access events.

Modules:
- events: event model, filters, and per-action payload types
- compliance: compliance flag derivation and metrics
- storage: durable storage collaborators
- export: JSON and CSV serialisation
- logger: the AuditLogger component
"""
