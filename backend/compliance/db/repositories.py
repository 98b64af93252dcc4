"""Repository protocol interfaces for data access."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from backend.compliance.models.common import RequirementStatus
from backend.compliance.models.requirement import (
    AppliedTransition,
    Requirement,
    RequirementScope,
)


class RequirementRepository(Protocol):
    """Repository for requirement records.

    Writes to an existing requirement are conditional on its version so
    that concurrent writers are linearized per requirement.
    """

    def get(self, requirement_id: UUID) -> Requirement | None:
        """Get requirement by ID.

        Args:
            requirement_id: Requirement ID

        Returns:
            Requirement or None if not found
        """
        ...

    def get_by_scope(self, scope: RequirementScope, document_type: str) -> Requirement | None:
        """Get the requirement for a (scope, document type) pair.

        Args:
            scope: Subcontractor/engagement scope
            document_type: Document type code

        Returns:
            Requirement or None if not found
        """
        ...

    def list_by_scope(self, scope: RequirementScope) -> list[Requirement]:
        """List all active requirements for a scope."""
        ...

    def list_by_status(self, statuses: set[RequirementStatus]) -> list[Requirement]:
        """List all active requirements currently in one of the given statuses."""
        ...

    def add(self, requirement: Requirement) -> None:
        """Insert a new requirement.

        Raises:
            ConcurrentModification: If one already exists for the same
                (scope, document type) pair
        """
        ...

    def compare_and_set(
        self,
        requirement: Requirement,
        expected_version: int,
        event: AppliedTransition | None = None,
    ) -> None:
        """Replace a requirement if its stored version is still expected_version.

        The event, when given, is added to the audit trail in the same write:
        either both are stored or neither is.

        Args:
            requirement: New state (carrying the bumped version)
            expected_version: Version the caller read and validated against
            event: Transition that produced the new state

        Raises:
            ConcurrentModification: If the stored version differs
            RequirementNotFound: If the requirement no longer exists
        """
        ...

    def retire(self, requirement_id: UUID, expected_version: int) -> None:
        """Remove a requirement whose level became hidden.

        Raises:
            ConcurrentModification: If the stored version differs
        """
        ...


class AuditSink(Protocol):
    """Receives every applied transition for notification and reporting."""

    def record(self, event: AppliedTransition) -> None:
        """Record an applied transition."""
        ...

    def for_requirement(self, requirement_id: UUID) -> list[AppliedTransition]:
        """Audit trail of one requirement, oldest first."""
        ...


class Clock(Protocol):
    """Injectable time source."""

    def now(self) -> datetime:
        """Current timezone-aware timestamp."""
        ...
