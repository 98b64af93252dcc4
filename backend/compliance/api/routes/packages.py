"""Compliance package endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from backend.compliance.models.common import RequirementLevel
from backend.compliance.models.facts import ConditionalFlags
from backend.compliance.rules.packages import CompliancePackage, list_packages, resolve_package

router = APIRouter(prefix="/packages", tags=["packages"])


class ResolveResponse(BaseModel):
    """Levels of a package resolved against boolean flags."""

    package_id: str
    levels: dict[str, RequirementLevel]


@router.get("", response_model=list[CompliancePackage])
async def get_packages() -> list[CompliancePackage]:
    """All predefined compliance packages."""
    return list_packages()


@router.post("/{package_id}/resolve", response_model=ResolveResponse)
async def resolve(
    package_id: str, flags: ConditionalFlags | None = None
) -> ResolveResponse:
    """Resolve a package against flags (all false when omitted)."""
    levels = resolve_package(package_id, flags or ConditionalFlags())
    return ResolveResponse(package_id=package_id, levels=levels)
