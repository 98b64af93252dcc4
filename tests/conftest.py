"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Any

import pytest

from backend.compliance.catalog.documents import LIABILITY_INSURANCE
from backend.compliance.config import Settings
from backend.compliance.db.inmemory import InMemoryAuditSink, InMemoryRequirementRepository
from backend.compliance.lifecycle.service import RequirementService
from backend.compliance.models import (
    Requirement,
    RequirementLevel,
    RequirementScope,
    RequirementStatus,
)
from backend.compliance.utils.clock import FixedClock

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FixedClock:
    """Clock fixed at 2025-03-01 09:00 UTC."""
    return FixedClock(T0)


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings: 30 day warning window, sequential sweeps."""
    return Settings(
        database_url=None,
        expiry_warning_days=30,
        default_due_days=14,
        max_transition_retries=3,
        sweep_max_workers=1,
    )


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def repository(audit_sink: InMemoryAuditSink) -> InMemoryRequirementRepository:
    return InMemoryRequirementRepository(audit_sink)


@pytest.fixture
def service(
    repository: InMemoryRequirementRepository,
    audit_sink: InMemoryAuditSink,
    clock: FixedClock,
    settings: Settings,
) -> RequirementService:
    """Lifecycle service over in-memory repositories."""
    return RequirementService(repository, audit_sink, clock, settings)


@pytest.fixture
def scope() -> RequirementScope:
    return RequirementScope(subcontractor_id=uuid.uuid4())


@pytest.fixture
def add_requirement(
    repository: InMemoryRequirementRepository, scope: RequirementScope
) -> Callable[..., Requirement]:
    """Factory storing a requirement in a given status.

    Usage:
        req = add_requirement(status=RequirementStatus.valid, valid_to=date(2025, 3, 20))
    """

    def _add(
        document_type: str = LIABILITY_INSURANCE,
        status: RequirementStatus = RequirementStatus.missing,
        **fields: Any,
    ) -> Requirement:
        if status in (RequirementStatus.valid, RequirementStatus.expiring):
            fields.setdefault("valid_from", date(2024, 3, 1))
            fields.setdefault("valid_to", date(2025, 3, 1))
        if status == RequirementStatus.rejected:
            fields.setdefault("rejection_reason", "unreadable scan")

        requirement = Requirement(
            scope=fields.pop("scope", scope),
            document_type=document_type,
            level=fields.pop("level", RequirementLevel.required),
            status=status,
            created_at=T0,
            updated_at=T0,
            **fields,
        )
        repository.add(requirement)
        return requirement

    return _add
