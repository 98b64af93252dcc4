"""Requirement models - instantiated document requirements and their history."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from backend.compliance.models.common import RequirementLevel, RequirementStatus, UploaderRole


class RequirementScope(BaseModel):
    """The subcontractor (and optionally the engagement) a requirement belongs to."""

    model_config = ConfigDict(frozen=True)

    subcontractor_id: uuid.UUID
    engagement_id: uuid.UUID | None = None


class UploadedDocument(BaseModel):
    """A single file submission for a requirement.

    valid_from/valid_to are filled once the submission is approved.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    file_name: str = Field(..., min_length=1)
    mime_type: str = "application/pdf"
    size_bytes: int = Field(0, ge=0)
    uploader_role: UploaderRole = UploaderRole.subcontractor
    uploaded_at: datetime
    valid_from: date | None = None
    valid_to: date | None = None


class Requirement(BaseModel):
    """A document type requested from one scope, with its lifecycle state.

    Invariants:
    - valid_from/valid_to are only set while status is valid or expiring
    - rejection_reason is only set while status is rejected
    - level is never hidden (hidden requirements are retired)
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    scope: RequirementScope
    document_type: str
    level: RequirementLevel
    status: RequirementStatus = RequirementStatus.missing
    due_date: date | None = None
    valid_from: date | None = None
    valid_to: date | None = None
    rejection_reason: str | None = None
    escalated: bool = False
    escalated_at: datetime | None = None
    escalation_reason: str | None = None
    documents: list[UploadedDocument] = Field(default_factory=list)
    version: int = Field(0, ge=0, description="Optimistic concurrency counter")
    created_at: datetime
    updated_at: datetime

    @property
    def latest_document(self) -> UploadedDocument | None:
        """The authoritative (most recent) submission, if any."""
        return self.documents[-1] if self.documents else None


class TransitionContext(BaseModel):
    """Caller-supplied context for a status transition."""

    valid_from: date | None = None
    rejection_reason: str | None = None
    actor: str | None = None
    document: UploadedDocument | None = None


class AppliedTransition(BaseModel):
    """A transition that was written, as delivered to the audit sink."""

    requirement_id: uuid.UUID
    from_status: RequirementStatus
    to_status: RequirementStatus
    trigger: str
    timestamp: datetime
    actor: str | None = None
