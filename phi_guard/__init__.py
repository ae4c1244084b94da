# phi_guard/__init__.py

"""Pattern-based PHI detection, redaction, and audit logging."""

__version__ = "0.1.0"
