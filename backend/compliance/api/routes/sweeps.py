"""Manual trigger for the scheduling sweep."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend.compliance.api.dependencies import get_requirement_service
from backend.compliance.lifecycle.service import RequirementService
from backend.compliance.models.requirement import AppliedTransition
from backend.compliance.scheduling.sweep import sweep_due_transitions

router = APIRouter(prefix="/sweeps", tags=["sweeps"])


class SweepResponse(BaseModel):
    """Transitions applied by one sweep."""

    applied: list[AppliedTransition]


@router.post("", response_model=SweepResponse)
def run_sweep(
    service: Annotated[RequirementService, Depends(get_requirement_service)],
) -> SweepResponse:
    """Apply every due time-driven transition now."""
    # A SQL service holds one request-scoped session, which is not thread-safe.
    workers = 1 if service.settings.database_url else None
    applied = sweep_due_transitions(service, service.clock.now(), max_workers=workers)
    return SweepResponse(applied=applied)
