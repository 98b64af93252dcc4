"""Models package - re-exports for convenience."""

from backend.compliance.models.catalog import (
    DocumentType,
    EndOfYear,
    FixedDays,
    NoExpiry,
    ValidityStrategy,
)
from backend.compliance.models.common import (
    Answer,
    RequirementLevel,
    RequirementLevelMap,
    RequirementStatus,
    UploaderRole,
)
from backend.compliance.models.facts import BusinessFacts, ConditionalFlags, OrgFlags
from backend.compliance.models.requirement import (
    AppliedTransition,
    Requirement,
    RequirementScope,
    TransitionContext,
    UploadedDocument,
)

__all__ = [
    # Common
    "Answer",
    "RequirementLevel",
    "RequirementLevelMap",
    "RequirementStatus",
    "UploaderRole",
    # Catalog
    "DocumentType",
    "ValidityStrategy",
    "NoExpiry",
    "FixedDays",
    "EndOfYear",
    # Facts
    "BusinessFacts",
    "OrgFlags",
    "ConditionalFlags",
    # Requirements
    "Requirement",
    "RequirementScope",
    "UploadedDocument",
    "TransitionContext",
    "AppliedTransition",
]
