"""In-memory implementations of repository interfaces."""

import threading
import uuid

from backend.compliance.errors import ConcurrentModification, RequirementNotFound
from backend.compliance.models.common import RequirementStatus
from backend.compliance.models.requirement import (
    AppliedTransition,
    Requirement,
    RequirementScope,
)


class InMemoryAuditSink:
    """In-memory implementation of AuditSink."""

    def __init__(self) -> None:
        self._events: list[AppliedTransition] = []
        self._lock = threading.Lock()

    def record(self, event: AppliedTransition) -> None:
        """Record an applied transition."""
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[AppliedTransition]:
        with self._lock:
            return list(self._events)

    def for_requirement(self, requirement_id: uuid.UUID) -> list[AppliedTransition]:
        """Events of one requirement in recording order."""
        return [e for e in self.events if e.requirement_id == requirement_id]


class InMemoryRequirementRepository:
    """In-memory implementation of RequirementRepository.

    A single lock guards the dict; it is only held for the duration of one
    read or one conditional write on one requirement. Transition events are
    handed to the audit sink while the lock is held.
    """

    def __init__(self, audit_sink: InMemoryAuditSink | None = None) -> None:
        self.audit_sink = audit_sink or InMemoryAuditSink()
        self._requirements: dict[uuid.UUID, Requirement] = {}
        self._by_scope: dict[tuple[RequirementScope, str], uuid.UUID] = {}
        self._lock = threading.Lock()

    def get(self, requirement_id: uuid.UUID) -> Requirement | None:
        """Get requirement by ID."""
        with self._lock:
            return self._requirements.get(requirement_id)

    def get_by_scope(self, scope: RequirementScope, document_type: str) -> Requirement | None:
        """Get the requirement for a (scope, document type) pair."""
        with self._lock:
            requirement_id = self._by_scope.get((scope, document_type))
            if requirement_id is None:
                return None
            return self._requirements.get(requirement_id)

    def list_by_scope(self, scope: RequirementScope) -> list[Requirement]:
        """List all requirements for a scope."""
        with self._lock:
            results = [r for r in self._requirements.values() if r.scope == scope]

        results.sort(key=lambda r: r.created_at)
        return results

    def list_by_status(self, statuses: set[RequirementStatus]) -> list[Requirement]:
        """List all requirements in one of the given statuses."""
        with self._lock:
            return [r for r in self._requirements.values() if r.status in statuses]

    def add(self, requirement: Requirement) -> None:
        """Insert a new requirement."""
        key = (requirement.scope, requirement.document_type)
        with self._lock:
            if key in self._by_scope:
                # Another writer instantiated the same pair first
                raise ConcurrentModification(requirement.id, requirement.version)
            self._requirements[requirement.id] = requirement
            self._by_scope[key] = requirement.id

    def compare_and_set(
        self,
        requirement: Requirement,
        expected_version: int,
        event: AppliedTransition | None = None,
    ) -> None:
        """Replace a requirement if its version is unchanged and record the event."""
        with self._lock:
            current = self._requirements.get(requirement.id)
            if current is None:
                raise RequirementNotFound(requirement.id)
            if current.version != expected_version:
                raise ConcurrentModification(requirement.id, expected_version)
            self._requirements[requirement.id] = requirement
            if event is not None:
                self.audit_sink.record(event)

    def retire(self, requirement_id: uuid.UUID, expected_version: int) -> None:
        """Remove a requirement if its version is unchanged."""
        with self._lock:
            current = self._requirements.get(requirement_id)
            if current is None:
                return
            if current.version != expected_version:
                raise ConcurrentModification(requirement_id, expected_version)
            del self._requirements[requirement_id]
            del self._by_scope[(current.scope, current.document_type)]
