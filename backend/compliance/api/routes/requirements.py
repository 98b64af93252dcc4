"""Requirement endpoints - derivation, sync, lifecycle transitions and escalation."""

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, model_validator

from backend.compliance.api.dependencies import get_requirement_service
from backend.compliance.lifecycle.service import RequirementService, TransitionResult
from backend.compliance.lifecycle.state_machine import (
    allowed_actions,
    next_states,
    state_description,
)
from backend.compliance.models.common import RequirementLevel, RequirementStatus, UploaderRole
from backend.compliance.models.facts import BusinessFacts, ConditionalFlags, OrgFlags
from backend.compliance.models.requirement import (
    AppliedTransition,
    Requirement,
    RequirementScope,
    TransitionContext,
    UploadedDocument,
)
from backend.compliance.rules.sources import PackageSource, QuestionnaireSource, RequirementSource

router = APIRouter(prefix="/requirements", tags=["requirements"])

ServiceDep = Annotated[RequirementService, Depends(get_requirement_service)]


class DeriveRequest(BaseModel):
    """Request body for POST /requirements/derive."""

    facts: BusinessFacts = Field(default_factory=BusinessFacts)
    org_flags: OrgFlags = Field(default_factory=OrgFlags)


class DeriveResponse(BaseModel):
    """Derived levels plus the codes that are optional only because of unknown answers."""

    levels: dict[str, RequirementLevel]
    uncertain: list[str]


class SyncRequest(BaseModel):
    """Request body for POST /requirements/sync.

    Exactly one of facts (questionnaire) or package_id (package) is given.
    """

    scope: RequirementScope
    facts: BusinessFacts | None = None
    org_flags: OrgFlags = Field(default_factory=OrgFlags)
    package_id: str | None = None
    flags: ConditionalFlags = Field(default_factory=ConditionalFlags)

    @model_validator(mode="after")
    def _one_source(self) -> "SyncRequest":
        if (self.facts is None) == (self.package_id is None):
            raise ValueError("exactly one of facts or package_id is required")
        return self

    def source(self) -> RequirementSource:
        if self.package_id is not None:
            return PackageSource(self.package_id, self.flags)
        assert self.facts is not None
        return QuestionnaireSource(self.facts, self.org_flags)


class SyncResponse(BaseModel):
    """Document codes touched by the sync."""

    source: str
    created: list[str]
    updated: list[str]
    retired: list[str]


class DocumentUpload(BaseModel):
    """Metadata of an uploaded file; the upload timestamp is set server-side."""

    file_name: str = Field(..., min_length=1)
    mime_type: str = "application/pdf"
    size_bytes: int = Field(0, ge=0)
    uploader_role: UploaderRole = UploaderRole.subcontractor


class TransitionRequest(BaseModel):
    """Request body for POST /requirements/{id}/transitions."""

    to_status: RequirementStatus
    valid_from: date | None = None
    rejection_reason: str | None = None
    actor: str | None = None
    document: DocumentUpload | None = None


class EscalationRequest(BaseModel):
    """Request body for POST /requirements/{id}/escalations."""

    reason: str


class RequirementView(Requirement):
    """Requirement plus what the UI may do with it in its current state."""

    description: str
    allowed_actions: list[str]
    next_states: list[RequirementStatus]

    @classmethod
    def of(cls, requirement: Requirement) -> "RequirementView":
        return cls(
            **requirement.model_dump(),
            description=state_description(requirement.status),
            allowed_actions=list(allowed_actions(requirement.status)),
            next_states=next_states(requirement.status),
        )


def _unwrap(result: TransitionResult) -> RequirementView:
    if result.error is not None:
        raise result.error
    assert result.requirement is not None
    return RequirementView.of(result.requirement)


@router.post("/derive", response_model=DeriveResponse)
async def derive(request: DeriveRequest) -> DeriveResponse:
    """Evaluate the questionnaire without touching any stored requirement."""
    source = QuestionnaireSource(request.facts, request.org_flags)
    levels = source.levels()
    return DeriveResponse(
        levels=levels,
        uncertain=[code for code in levels if source.is_uncertain(code)],
    )


@router.post("/sync", response_model=SyncResponse)
def sync(request: SyncRequest, service: ServiceDep) -> SyncResponse:
    """Instantiate, update and retire a scope's requirements from a source."""
    source = request.source()
    result = service.sync_requirements(request.scope, source)
    return SyncResponse(
        source=source.name,
        created=result.created,
        updated=result.updated,
        retired=result.retired,
    )


@router.get("", response_model=list[RequirementView])
def list_requirements(
    service: ServiceDep,
    subcontractor_id: Annotated[uuid.UUID, Query()],
    engagement_id: Annotated[uuid.UUID | None, Query()] = None,
) -> list[RequirementView]:
    """List the requirements of one scope."""
    scope = RequirementScope(subcontractor_id=subcontractor_id, engagement_id=engagement_id)
    return [RequirementView.of(r) for r in service.list_requirements(scope)]


@router.get("/{requirement_id}", response_model=RequirementView)
def get_requirement(requirement_id: uuid.UUID, service: ServiceDep) -> RequirementView:
    """Get one requirement with its allowed actions."""
    return RequirementView.of(service.get_requirement(requirement_id))


@router.get("/{requirement_id}/transitions", response_model=list[AppliedTransition])
def list_transitions(requirement_id: uuid.UUID, service: ServiceDep) -> list[AppliedTransition]:
    """Audit trail of one requirement."""
    service.get_requirement(requirement_id)
    return service.audit_sink.for_requirement(requirement_id)


@router.post("/{requirement_id}/transitions", response_model=RequirementView)
def apply_transition(
    requirement_id: uuid.UUID, request: TransitionRequest, service: ServiceDep
) -> RequirementView:
    """Move a requirement to another status.

    Returns:
        The updated requirement

    Raises:
        RequirementEngineError: Rendered as 404 / 409 / 422 by kind
    """
    document = None
    if request.document is not None:
        document = UploadedDocument(
            **request.document.model_dump(), uploaded_at=service.clock.now()
        )

    context = TransitionContext(
        valid_from=request.valid_from,
        rejection_reason=request.rejection_reason,
        actor=request.actor,
        document=document,
    )
    return _unwrap(service.apply_transition(requirement_id, request.to_status, context))


@router.post("/{requirement_id}/escalations", response_model=RequirementView)
def escalate(
    requirement_id: uuid.UUID, request: EscalationRequest, service: ServiceDep
) -> RequirementView:
    """Flag a requirement for escalation."""
    return _unwrap(service.escalate(requirement_id, request.reason))
