"""Scheduling trigger - detects and applies time-driven transitions.

The sweep holds no to-do queue: every run recomputes from scratch which
requirements are due, so a crashed sweep can simply be run again.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from uuid import UUID

from backend.compliance.catalog.validity import is_expired, is_expiring
from backend.compliance.lifecycle.service import RequirementService, TransitionResult
from backend.compliance.models.common import RequirementStatus
from backend.compliance.models.requirement import AppliedTransition, Requirement, TransitionContext

SWEEP_ACTOR = "scheduler"

ACTIVE_STATUSES = {RequirementStatus.valid, RequirementStatus.expiring}


def due_transition(
    requirement: Requirement, today: date, warning_days: int
) -> RequirementStatus | None:
    """Detect the time-driven transition a requirement is due for.

    Args:
        requirement: Requirement to evaluate
        today: Current date
        warning_days: Days before valid_to at which valid becomes expiring

    Returns:
        expired once valid_to has passed, expiring for a valid requirement
        inside the warning window, otherwise None
    """
    if requirement.status not in ACTIVE_STATUSES or requirement.valid_to is None:
        return None

    if is_expired(requirement.valid_to, today):
        return RequirementStatus.expired

    if requirement.status == RequirementStatus.valid and is_expiring(
        requirement.valid_to, today, warning_days
    ):
        return RequirementStatus.expiring

    return None


def _sweep_one(service: RequirementService, requirement_id: UUID, today: date) -> TransitionResult:
    def mutate(current: Requirement) -> tuple[Requirement, AppliedTransition] | None:
        target = due_transition(
            current, today, service.settings.warning_days_for(current.document_type)
        )
        if target is None:
            return None
        return service.transition(current, target, TransitionContext(actor=SWEEP_ACTOR))

    return service.update(requirement_id, mutate)


def sweep_due_transitions(
    service: RequirementService,
    now: datetime,
    max_workers: int | None = None,
) -> list[AppliedTransition]:
    """Apply every time-driven transition that is due as of now.

    Each requirement is re-read and re-evaluated right before its write and
    transitions at most once per sweep; running the sweep twice in a row
    applies nothing the second time.

    Args:
        service: Lifecycle service owning repository, clock and audit sink
        now: Reference time for the sweep
        max_workers: Parallelism across independent requirements
            (defaults to settings.sweep_max_workers)

    Returns:
        Transitions applied by this sweep, in scan order
    """
    started = time.perf_counter()
    today = now.date()
    workers = max_workers or service.settings.sweep_max_workers

    candidates = [r.id for r in service.repository.list_by_status(ACTIVE_STATUSES)]

    if workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda rid: _sweep_one(service, rid, today), candidates))
    else:
        results = [_sweep_one(service, rid, today) for rid in candidates]

    applied = [r.applied for r in results if r.ok and r.applied is not None]
    conflicts = sum(1 for r in results if not r.ok)

    latency_ms = (time.perf_counter() - started) * 1000
    service.metrics.record_sweep(latency_ms)
    service.transition_logger.log_sweep(len(candidates), len(applied), conflicts, latency_ms)

    return applied
