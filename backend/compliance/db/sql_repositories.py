"""SQL implementations of repository interfaces."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.compliance.db.models import (
    RequirementRow,
    RequirementTransitionRow,
    UploadedDocumentRow,
)
from backend.compliance.db.queries import scope_key, select_requirements
from backend.compliance.errors import ConcurrentModification, RequirementNotFound
from backend.compliance.models.common import (
    RequirementLevel,
    RequirementStatus,
    UploaderRole,
)
from backend.compliance.models.requirement import (
    AppliedTransition,
    Requirement,
    RequirementScope,
    UploadedDocument,
)


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_domain(row: RequirementRow) -> Requirement:
    return Requirement(
        id=row.id,
        scope=RequirementScope(subcontractor_id=row.subcontractor_id, engagement_id=row.engagement_id),
        document_type=row.document_type,
        level=RequirementLevel(row.level),
        status=RequirementStatus(row.status),
        due_date=row.due_date,
        valid_from=row.valid_from,
        valid_to=row.valid_to,
        rejection_reason=row.rejection_reason,
        escalated=row.escalated,
        escalated_at=_aware(row.escalated_at),
        escalation_reason=row.escalation_reason,
        documents=[
            UploadedDocument(
                id=doc.id,
                file_name=doc.file_name,
                mime_type=doc.mime_type,
                size_bytes=doc.size_bytes,
                uploader_role=UploaderRole(doc.uploader_role),
                uploaded_at=_aware(doc.uploaded_at),
                valid_from=doc.valid_from,
                valid_to=doc.valid_to,
            )
            for doc in row.documents
        ],
        version=row.version,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _state_columns(requirement: Requirement) -> dict:
    """Columns that change with a transition; written in one statement."""
    return {
        "level": requirement.level.value,
        "status": requirement.status.value,
        "due_date": requirement.due_date,
        "valid_from": requirement.valid_from,
        "valid_to": requirement.valid_to,
        "rejection_reason": requirement.rejection_reason,
        "escalated": requirement.escalated,
        "escalated_at": requirement.escalated_at,
        "escalation_reason": requirement.escalation_reason,
        "version": requirement.version,
        "updated_at": requirement.updated_at,
    }


def _document_row(requirement_id: uuid.UUID, position: int, doc: UploadedDocument) -> UploadedDocumentRow:
    return UploadedDocumentRow(
        id=doc.id,
        requirement_id=requirement_id,
        position=position,
        file_name=doc.file_name,
        mime_type=doc.mime_type,
        size_bytes=doc.size_bytes,
        uploader_role=doc.uploader_role.value,
        uploaded_at=doc.uploaded_at,
        valid_from=doc.valid_from,
        valid_to=doc.valid_to,
    )


def _transition_row(event: AppliedTransition) -> RequirementTransitionRow:
    return RequirementTransitionRow(
        requirement_id=event.requirement_id,
        from_status=event.from_status.value,
        to_status=event.to_status.value,
        trigger=event.trigger,
        actor=event.actor,
        timestamp=event.timestamp,
    )


class SqlRequirementRepository:
    """SQL implementation of RequirementRepository.

    Conditional writes use UPDATE ... WHERE version = :expected so the
    database linearizes concurrent writers per requirement.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, requirement_id: uuid.UUID) -> Requirement | None:
        """Get requirement by ID."""
        self._session.expire_all()
        row = self._session.get(RequirementRow, requirement_id)
        return _to_domain(row) if row is not None else None

    def get_by_scope(self, scope: RequirementScope, document_type: str) -> Requirement | None:
        """Get the requirement for a (scope, document type) pair."""
        self._session.expire_all()
        row = self._session.scalars(
            select_requirements(scope).where(RequirementRow.document_type == document_type)
        ).first()
        return _to_domain(row) if row is not None else None

    def list_by_scope(self, scope: RequirementScope) -> list[Requirement]:
        """List all requirements for a scope."""
        self._session.expire_all()
        rows = self._session.scalars(select_requirements(scope)).all()
        return [_to_domain(row) for row in rows]

    def list_by_status(self, statuses: set[RequirementStatus]) -> list[Requirement]:
        """List all requirements in one of the given statuses."""
        self._session.expire_all()
        rows = self._session.scalars(
            select(RequirementRow)
            .where(RequirementRow.status.in_([s.value for s in statuses]))
            .order_by(RequirementRow.created_at)
        ).all()
        return [_to_domain(row) for row in rows]

    def add(self, requirement: Requirement) -> None:
        """Insert a new requirement."""
        row = RequirementRow(
            id=requirement.id,
            scope_key=scope_key(requirement.scope),
            subcontractor_id=requirement.scope.subcontractor_id,
            engagement_id=requirement.scope.engagement_id,
            document_type=requirement.document_type,
            created_at=requirement.created_at,
            **_state_columns(requirement),
        )
        row.documents = [
            _document_row(requirement.id, i, doc) for i, doc in enumerate(requirement.documents)
        ]

        self._session.add(row)
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise ConcurrentModification(requirement.id, requirement.version) from e

    def compare_and_set(
        self,
        requirement: Requirement,
        expected_version: int,
        event: AppliedTransition | None = None,
    ) -> None:
        """Replace a requirement if its version is unchanged.

        The transition row, submission history and state columns are
        committed together.
        """
        result = self._session.execute(
            update(RequirementRow)
            .where(RequirementRow.id == requirement.id, RequirementRow.version == expected_version)
            .values(**_state_columns(requirement))
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            self._session.rollback()
            if self._session.get(RequirementRow, requirement.id) is None:
                raise RequirementNotFound(requirement.id)
            raise ConcurrentModification(requirement.id, expected_version)

        # Submission history is append-only apart from the validity stamp of
        # the latest entry; merge keeps it in the same transaction.
        for position, doc in enumerate(requirement.documents):
            self._session.merge(_document_row(requirement.id, position, doc))

        if event is not None:
            self._session.add(_transition_row(event))

        try:
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise

    def retire(self, requirement_id: uuid.UUID, expected_version: int) -> None:
        """Remove a requirement if its version is unchanged."""
        self._session.execute(
            delete(UploadedDocumentRow).where(UploadedDocumentRow.requirement_id == requirement_id)
        )
        result = self._session.execute(
            delete(RequirementRow).where(
                RequirementRow.id == requirement_id, RequirementRow.version == expected_version
            )
        )

        if result.rowcount == 0:
            self._session.rollback()
            if self._session.get(RequirementRow, requirement_id) is None:
                return
            raise ConcurrentModification(requirement_id, expected_version)

        self._session.commit()


class SqlAuditSink:
    """SQL implementation of AuditSink."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def record(self, event: AppliedTransition) -> None:
        """Record an applied transition."""
        self._session.add(_transition_row(event))
        self._session.commit()

    def for_requirement(self, requirement_id: uuid.UUID) -> list[AppliedTransition]:
        """Audit trail of one requirement, oldest first."""
        rows = self._session.scalars(
            select(RequirementTransitionRow)
            .where(RequirementTransitionRow.requirement_id == requirement_id)
            .order_by(RequirementTransitionRow.timestamp)
        ).all()
        return [
            AppliedTransition(
                requirement_id=row.requirement_id,
                from_status=RequirementStatus(row.from_status),
                to_status=RequirementStatus(row.to_status),
                trigger=row.trigger,
                actor=row.actor,
                timestamp=_aware(row.timestamp),
            )
            for row in rows
        ]
