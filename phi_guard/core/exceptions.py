# phi_guard/core/exceptions.py

"""Custom exception hierarchy for the PHI guard system.

This module defines the specific error types used throughout the application
to differentiate between configuration, validation, and storage errors.
"""


class PHIGuardError(Exception):
    """Base exception for all application-specific errors."""

    pass


class ConfigurationError(PHIGuardError):
    """Raised when configuration or pattern registry loading fails."""

    pass


class ValidationError(PHIGuardError):
    """Raised when caller-supplied options or vocabulary values are invalid."""

    pass


class StorageError(PHIGuardError):
    """Raised by durable audit storage when a read or write fails."""

    pass
