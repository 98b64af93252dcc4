"""Common enums shared across all models."""

from enum import Enum


class Answer(str, Enum):
    """Tri-state questionnaire answer."""

    yes = "yes"
    no = "no"
    unknown = "unknown"


class RequirementLevel(str, Enum):
    """How strongly a document type is requested from a subcontractor."""

    required = "required"
    optional = "optional"
    hidden = "hidden"


class RequirementStatus(str, Enum):
    """Lifecycle status of an instantiated requirement."""

    missing = "missing"
    submitted = "submitted"
    in_review = "in_review"
    valid = "valid"
    expiring = "expiring"
    expired = "expired"
    rejected = "rejected"


class UploaderRole(str, Enum):
    """Who submitted a document."""

    subcontractor = "subcontractor"
    reviewer = "reviewer"
    admin = "admin"


# Document type code -> level. Codes absent from the map are hidden.
RequirementLevelMap = dict[str, RequirementLevel]
