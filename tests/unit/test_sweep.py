"""Unit tests for the scheduling sweep."""

from collections.abc import Callable
from datetime import date

import pytest

from backend.compliance.catalog.documents import A1_CERTIFICATE, LIABILITY_INSURANCE
from backend.compliance.config import Settings
from backend.compliance.db.inmemory import InMemoryAuditSink, InMemoryRequirementRepository
from backend.compliance.lifecycle.service import RequirementService
from backend.compliance.models import Requirement, RequirementStatus
from backend.compliance.scheduling.scheduler import SweepScheduler
from backend.compliance.scheduling.sweep import (
    SWEEP_ACTOR,
    due_transition,
    sweep_due_transitions,
)
from backend.compliance.utils.clock import FixedClock
from backend.compliance.utils.logging import StructuredTransitionLogger
from backend.compliance.utils.metrics import PrometheusEngineMetrics

S = RequirementStatus


@pytest.mark.parametrize(
    "status,valid_to,expected",
    [
        (S.valid, date(2025, 6, 1), None),
        (S.valid, date(2025, 3, 31), S.expiring),
        (S.valid, date(2025, 3, 1), S.expiring),
        (S.valid, date(2025, 2, 28), S.expired),
        (S.expiring, date(2025, 3, 10), None),
        (S.expiring, date(2025, 2, 28), S.expired),
        (S.in_review, date(2025, 2, 1), None),
    ],
)
def test_due_transition(
    add_requirement: Callable[..., Requirement],
    status: RequirementStatus,
    valid_to: date,
    expected: RequirementStatus | None,
) -> None:
    """Test detection of time-driven transitions as of 2025-03-01."""
    requirement = add_requirement(status=status, valid_to=valid_to)
    assert due_transition(requirement, date(2025, 3, 1), 30) == expected


def test_no_expiry_documents_never_transition(add_requirement: Callable[..., Requirement]) -> None:
    """Test that a valid requirement without valid_to stays valid."""
    requirement = add_requirement(status=S.valid, valid_from=date(2020, 1, 1), valid_to=None)
    assert due_transition(requirement, date(2099, 1, 1), 30) is None


def test_sweep_applies_due_transitions(
    service: RequirementService,
    clock: FixedClock,
    audit_sink: InMemoryAuditSink,
    add_requirement: Callable[..., Requirement],
) -> None:
    """Test that a sweep moves valid to expiring and expiring to expired."""
    soon = add_requirement(status=S.valid, valid_to=date(2025, 3, 20))
    gone = add_requirement(
        document_type=A1_CERTIFICATE, status=S.expiring, valid_to=date(2025, 2, 27)
    )

    applied = sweep_due_transitions(service, clock.now())

    assert {(e.requirement_id, e.to_status) for e in applied} == {
        (soon.id, S.expiring),
        (gone.id, S.expired),
    }
    assert all(e.actor == SWEEP_ACTOR for e in applied)
    assert service.get_requirement(soon.id).status == S.expiring
    assert service.get_requirement(gone.id).valid_to is None
    assert len(audit_sink.events) == 2


def test_sweep_is_idempotent(
    service: RequirementService,
    clock: FixedClock,
    add_requirement: Callable[..., Requirement],
) -> None:
    """Test that a second sweep at the same time applies nothing."""
    add_requirement(status=S.valid, valid_to=date(2025, 3, 20))

    first = sweep_due_transitions(service, clock.now())
    second = sweep_due_transitions(service, clock.now())

    assert len(first) == 1
    assert second == []


def test_long_overdue_valid_goes_straight_to_expired(
    service: RequirementService,
    clock: FixedClock,
    add_requirement: Callable[..., Requirement],
) -> None:
    """Test that a missed warning window does not leave the requirement expiring."""
    requirement = add_requirement(status=S.valid, valid_to=date(2025, 1, 1))

    applied = sweep_due_transitions(service, clock.now())

    assert [e.to_status for e in applied] == [S.expired]
    assert service.get_requirement(requirement.id).status == S.expired


def test_per_document_warning_override(
    repository: InMemoryRequirementRepository,
    audit_sink: InMemoryAuditSink,
    clock: FixedClock,
    add_requirement: Callable[..., Requirement],
) -> None:
    """Test that a shorter window for one document type defers its warning."""
    settings = Settings(
        database_url=None,
        expiry_warning_days=30,
        expiry_warning_overrides={A1_CERTIFICATE: 7},
        sweep_max_workers=1,
    )
    service = RequirementService(repository, audit_sink, clock, settings)
    a1 = add_requirement(document_type=A1_CERTIFICATE, status=S.valid, valid_to=date(2025, 3, 20))
    insurance = add_requirement(
        document_type=LIABILITY_INSURANCE, status=S.valid, valid_to=date(2025, 3, 20)
    )

    applied = sweep_due_transitions(service, clock.now())

    assert [e.requirement_id for e in applied] == [insurance.id]
    assert service.get_requirement(a1.id).status == S.valid


def test_sweep_reevaluates_after_concurrent_renewal(
    service: RequirementService,
    clock: FixedClock,
    add_requirement: Callable[..., Requirement],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that a requirement renewed between scan and write is left alone."""
    requirement = add_requirement(status=S.expiring, valid_to=date(2025, 2, 27))
    renewed = requirement.model_copy(
        update={
            "status": S.valid,
            "valid_from": date(2025, 2, 26),
            "valid_to": date(2026, 2, 26),
            "version": requirement.version + 1,
        }
    )
    service.repository.compare_and_set(renewed, requirement.version)
    # The scan still sees the stale expiring copy
    monkeypatch.setattr(service.repository, "list_by_status", lambda statuses: [requirement])

    applied = sweep_due_transitions(service, clock.now())

    assert applied == []
    assert service.get_requirement(requirement.id).status == S.valid


def test_parallel_sweep(
    repository: InMemoryRequirementRepository,
    audit_sink: InMemoryAuditSink,
    clock: FixedClock,
    add_requirement: Callable[..., Requirement],
) -> None:
    """Test that a sweep over several workers applies each transition once."""
    service = RequirementService(
        repository,
        audit_sink,
        clock,
        Settings(database_url=None, sweep_max_workers=4),
    )
    for days in range(1, 9):
        add_requirement(
            document_type=f"doc_{days}", status=S.valid, valid_to=date(2025, 3, 1 + days)
        )

    applied = sweep_due_transitions(service, clock.now())

    assert len(applied) == 8
    assert len({e.requirement_id for e in applied}) == 8
    assert len(audit_sink.events) == 8


def test_scheduler_run_once_uses_service_clock(
    service: RequirementService,
    clock: FixedClock,
    add_requirement: Callable[..., Requirement],
) -> None:
    """Test that the scheduler sweeps as of the injected clock."""
    requirement = add_requirement(status=S.valid, valid_to=date(2025, 4, 15))
    scheduler = SweepScheduler(service, interval_seconds=60)

    assert scheduler.run_once() == []

    clock.advance(days=20)
    applied = scheduler.run_once()

    assert [e.requirement_id for e in applied] == [requirement.id]


def test_scheduler_stop_before_start(service: RequirementService) -> None:
    """Test that a stopped scheduler returns from run_forever immediately."""
    scheduler = SweepScheduler(service, interval_seconds=60)
    scheduler.stop()

    scheduler.run_forever()

    assert scheduler.stopped


class RecordingMetrics(PrometheusEngineMetrics):
    """Metrics that remember sweep latencies."""

    def __init__(self) -> None:
        self.sweeps: list[float] = []

    def record_sweep(self, latency_ms: float) -> None:
        self.sweeps.append(latency_ms)
        super().record_sweep(latency_ms)


class RecordingLogger(StructuredTransitionLogger):
    """Transition logger that remembers sweep summaries."""

    def __init__(self) -> None:
        super().__init__()
        self.sweeps: list[tuple[int, int, int]] = []

    def log_sweep(self, scanned: int, applied: int, conflicts: int, latency_ms: float) -> None:
        self.sweeps.append((scanned, applied, conflicts))
        super().log_sweep(scanned, applied, conflicts, latency_ms)


def test_sweep_reports_through_service_observers(
    repository: InMemoryRequirementRepository,
    audit_sink: InMemoryAuditSink,
    clock: FixedClock,
    settings: Settings,
    add_requirement: Callable[..., Requirement],
) -> None:
    """Test that the sweep uses the metrics and logger injected into the service."""
    metrics = RecordingMetrics()
    transition_logger = RecordingLogger()
    service = RequirementService(
        repository,
        audit_sink,
        clock,
        settings,
        metrics=metrics,
        transition_logger=transition_logger,
    )
    add_requirement(status=S.valid, valid_to=date(2025, 3, 20))
    add_requirement(document_type=A1_CERTIFICATE, status=S.valid, valid_to=date(2025, 9, 1))

    sweep_due_transitions(service, clock.now())

    assert len(metrics.sweeps) == 1
    assert transition_logger.sweeps == [(2, 1, 0)]
