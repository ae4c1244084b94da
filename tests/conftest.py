"""
PHI Guard Test Configuration

Pytest fixtures shared by the detector, redactor, and audit logger tests.
"""

from typing import Generator, List

import pytest

from phi_guard.audit.events import AuditEvent, ClientContext
from phi_guard.audit.logger import AuditLogger
from phi_guard.audit.storage import InMemoryAuditStorage
from phi_guard.core.exceptions import StorageError
from phi_guard.engine.detector import PHIDetector
from phi_guard.engine.redactor import PHIRedactor

# ============================================
# Engine Fixtures
# ============================================


@pytest.fixture(scope="session")
def detector() -> PHIDetector:
    """Detector over the bundled pattern registry."""
    return PHIDetector()


@pytest.fixture
def redactor(detector: PHIDetector) -> PHIRedactor:
    return PHIRedactor(detector)


@pytest.fixture
def sample_phi_text() -> str:
    return (
        "Patient: John Doe, SSN: 123-45-6789, "
        "email john.doe@email.com, phone (555) 123-4567"
    )


# ============================================
# Audit Fixtures
# ============================================


class FailingStorage:
    """Storage stand-in whose writes always fail."""

    def __init__(self) -> None:
        self.attempts = 0

    def persist(self, event: AuditEvent) -> None:
        self.attempts += 1
        raise StorageError("disk full")

    def load_all(self) -> List[AuditEvent]:
        raise StorageError("store unavailable")


@pytest.fixture
def storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage(capacity=100)


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def alerts() -> List[AuditEvent]:
    """Collects events passed to the high-risk alert handler."""
    return []


@pytest.fixture
def audit_logger(
    storage: InMemoryAuditStorage, alerts: List[AuditEvent]
) -> Generator[AuditLogger, None, None]:
    """Initialised audit logger backed by in-memory storage."""
    with AuditLogger(
        storage,
        max_events=1000,
        alert_handler=alerts.append,
        client_context=ClientContext(ip_address="10.1.2.3", user_agent="pytest"),
    ) as audit:
        yield audit
