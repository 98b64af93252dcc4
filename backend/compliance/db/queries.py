"""Scope-safe query helpers."""

from sqlalchemy import Select, select

from backend.compliance.db.models import RequirementRow
from backend.compliance.models.requirement import RequirementScope


def scope_key(scope: RequirementScope) -> str:
    """Stable string key of a scope, used for the uniqueness constraint."""
    engagement = str(scope.engagement_id) if scope.engagement_id else "-"
    return f"{scope.subcontractor_id}:{engagement}"


def select_requirements(scope: RequirementScope) -> Select[tuple[RequirementRow]]:
    """Select requirement rows of one scope, oldest first.

    Args:
        scope: Subcontractor/engagement scope

    Returns:
        Select statement filtered by scope_key
    """
    return (
        select(RequirementRow)
        .where(RequirementRow.scope_key == scope_key(scope))
        .order_by(RequirementRow.created_at)
    )
