"""Requirement lifecycle service - applies transitions against a repository.

Every update follows the same read-validate-conditional-write cycle: read
the current requirement, compute the new state from it, then write
conditionally on the version that was read. On a conflict the whole cycle
is repeated from a fresh read.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta

from backend.compliance.catalog.documents import DEFAULT_CATALOG, DocumentCatalog
from backend.compliance.config import Settings, get_settings
from backend.compliance.db.repositories import AuditSink, Clock, RequirementRepository
from backend.compliance.errors import (
    ConcurrentModification,
    MissingRequiredContext,
    RequirementEngineError,
    RequirementNotFound,
)
from backend.compliance.lifecycle.state_machine import transition_requirement, transition_trigger
from backend.compliance.models.common import RequirementLevel, RequirementStatus
from backend.compliance.models.requirement import (
    AppliedTransition,
    Requirement,
    RequirementScope,
    TransitionContext,
    UploadedDocument,
)
from backend.compliance.rules.sources import RequirementSource
from backend.compliance.utils.logging import StructuredTransitionLogger
from backend.compliance.utils.metrics import PrometheusEngineMetrics

logger = logging.getLogger(__name__)

# Decides the next state of a freshly read requirement. Returning None means
# there is nothing to write.
Mutation = Callable[[Requirement], tuple[Requirement, AppliedTransition | None] | None]


@dataclass
class TransitionResult:
    """Outcome of a requirement update: either a requirement or a typed error."""

    requirement: Requirement | None = None
    error: RequirementEngineError | None = None
    applied: AppliedTransition | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncResult:
    """Document codes touched by a requirement sync."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    retired: list[str] = field(default_factory=list)


class RequirementService:
    """Applies lifecycle transitions with optimistic concurrency."""

    def __init__(
        self,
        repository: RequirementRepository,
        audit_sink: AuditSink,
        clock: Clock,
        settings: Settings | None = None,
        catalog: DocumentCatalog = DEFAULT_CATALOG,
        metrics: PrometheusEngineMetrics | None = None,
        transition_logger: StructuredTransitionLogger | None = None,
    ) -> None:
        self.repository = repository
        self.audit_sink = audit_sink
        self.clock = clock
        self.settings = settings or get_settings()
        self.catalog = catalog
        self.metrics = metrics or PrometheusEngineMetrics()
        self.transition_logger = transition_logger or StructuredTransitionLogger()

    def get_requirement(self, requirement_id: uuid.UUID) -> Requirement:
        """Get a requirement.

        Raises:
            RequirementNotFound: If no requirement has this id
        """
        requirement = self.repository.get(requirement_id)
        if requirement is None:
            raise RequirementNotFound(requirement_id)
        return requirement

    def list_requirements(self, scope: RequirementScope) -> list[Requirement]:
        return self.repository.list_by_scope(scope)

    def sync_requirements(self, scope: RequirementScope, source: RequirementSource) -> SyncResult:
        """Reconcile a scope's requirements with a requirement source.

        - Non-hidden codes without a requirement are instantiated as missing
        - Existing requirements pick up level changes
        - Requirements whose level became hidden (or absent) are retired

        Each write is committed on its own, so a conflict partway through
        leaves the scope partly synced. Sync is idempotent: running it again
        with the same source finishes the remaining codes.

        Raises:
            UnknownDocumentType: If the source yields a code outside the catalog
            ConcurrentModification: If another writer touched the scope meanwhile
        """
        levels = source.levels()
        for code in levels:
            self.catalog.get(code)

        now = self.clock.now()
        result = SyncResult()
        existing = {r.document_type: r for r in self.repository.list_by_scope(scope)}

        for code, level in levels.items():
            if level == RequirementLevel.hidden:
                continue

            current = existing.get(code)
            if current is None:
                self.repository.add(
                    Requirement(
                        scope=scope,
                        document_type=code,
                        level=level,
                        due_date=now.date() + timedelta(days=self.settings.default_due_days),
                        created_at=now,
                        updated_at=now,
                    )
                )
                result.created.append(code)
            elif current.level != level:
                updated = current.model_copy(
                    update={"level": level, "version": current.version + 1, "updated_at": now}
                )
                self.repository.compare_and_set(updated, current.version)
                result.updated.append(code)

        for code, current in existing.items():
            if levels.get(code, RequirementLevel.hidden) == RequirementLevel.hidden:
                self.repository.retire(current.id, current.version)
                result.retired.append(code)

        logger.info(
            f"[sync_requirements] source={source.name} created={len(result.created)} "
            f"updated={len(result.updated)} retired={len(result.retired)}"
        )
        return result

    def apply_transition(
        self,
        requirement_id: uuid.UUID,
        target: RequirementStatus,
        context: TransitionContext | None = None,
    ) -> TransitionResult:
        """Move a requirement to a target status.

        Args:
            requirement_id: Requirement to transition
            target: Desired status
            context: valid_from for approval, rejection_reason for rejection,
                optional document for uploads

        Returns:
            TransitionResult with the updated requirement, or with an
            InvalidTransition / MissingRequiredContext / UnknownDocumentType /
            ConcurrentModification / RequirementNotFound error
        """
        context = context or TransitionContext()

        def mutate(current: Requirement) -> tuple[Requirement, AppliedTransition]:
            return self.transition(current, target, context)

        return self.update(requirement_id, mutate)

    def record_upload(
        self, requirement_id: uuid.UUID, document: UploadedDocument, actor: str | None = None
    ) -> TransitionResult:
        """Append a submission to the history and mark the requirement submitted."""
        return self.apply_transition(
            requirement_id,
            RequirementStatus.submitted,
            TransitionContext(document=document, actor=actor),
        )

    def escalate(self, requirement_id: uuid.UUID, reason: str) -> TransitionResult:
        """Flag a requirement for escalation without changing its status."""
        if not reason.strip():
            error = MissingRequiredContext("escalation_reason", "escalation_reason is required")
            self.metrics.inc_error(error.kind.value)
            return TransitionResult(error=error)

        def mutate(current: Requirement) -> tuple[Requirement, None] | None:
            if current.escalated:
                return None
            now = self.clock.now()
            updated = current.model_copy(
                update={
                    "escalated": True,
                    "escalated_at": now,
                    "escalation_reason": reason.strip(),
                    "version": current.version + 1,
                    "updated_at": now,
                }
            )
            return updated, None

        result = self.update(requirement_id, mutate)
        if result.ok:
            logger.info(f"[escalate] requirement_id={requirement_id} reason={reason.strip()!r}")
        return result

    def transition(
        self, current: Requirement, target: RequirementStatus, context: TransitionContext
    ) -> tuple[Requirement, AppliedTransition]:
        """Compute a transition of a freshly read requirement and its audit event."""
        now = self.clock.now()
        updated = transition_requirement(current, target, context, now, self.catalog)
        event = AppliedTransition(
            requirement_id=current.id,
            from_status=current.status,
            to_status=target,
            trigger=transition_trigger(current.status, target),
            timestamp=now,
            actor=context.actor,
        )
        return updated, event

    def update(self, requirement_id: uuid.UUID, mutate: Mutation) -> TransitionResult:
        """Run the read-validate-conditional-write cycle for one requirement.

        mutate is called on every fresh read, so decisions are always made
        against the current state. The audit event is written together with
        the new state, so it exists exactly when the conditional write succeeded.
        """
        attempts = self.settings.max_transition_retries + 1
        last_conflict: ConcurrentModification | None = None

        for attempt in range(1, attempts + 1):
            current = self.repository.get(requirement_id)
            if current is None:
                error = RequirementNotFound(requirement_id)
                self.metrics.inc_error(error.kind.value)
                return TransitionResult(error=error)

            try:
                outcome = mutate(current)
            except RequirementEngineError as e:
                self._record_rejection(current, e, attempt)
                return TransitionResult(requirement=current, error=e)

            if outcome is None:
                return TransitionResult(requirement=current)

            updated, event = outcome
            try:
                self.repository.compare_and_set(updated, current.version, event)
            except ConcurrentModification as e:
                last_conflict = e
                if event is not None:
                    self.transition_logger.log_transition(
                        current.id,
                        event.from_status,
                        event.to_status,
                        "conflict",
                        attempt=attempt,
                        error_kind=e.kind.value,
                    )
                continue
            except RequirementNotFound as e:
                self.metrics.inc_error(e.kind.value)
                return TransitionResult(error=e)

            if event is not None:
                self.metrics.inc_transition(event.from_status.value, event.to_status.value)
                self.transition_logger.log_transition(
                    current.id,
                    event.from_status,
                    event.to_status,
                    "applied",
                    attempt=attempt,
                    actor=event.actor,
                )
            return TransitionResult(requirement=updated, applied=event)

        assert last_conflict is not None
        self.metrics.inc_error(last_conflict.kind.value)
        return TransitionResult(error=last_conflict)

    def _record_rejection(
        self, current: Requirement, error: RequirementEngineError, attempt: int
    ) -> None:
        self.metrics.inc_error(error.kind.value)
        logger.warning(
            f"Requirement update rejected: {error.message}",
            extra={
                "structured": {
                    "requirement_id": str(current.id),
                    "status": current.status.value,
                    "error_kind": error.kind.value,
                    "attempt": attempt,
                }
            },
        )
