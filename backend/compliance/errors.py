"""Typed errors raised by the requirement engine.

Every error carries an ErrorKind so callers can branch on it without
matching exception classes. All of them are recoverable by the caller.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-usable error categories."""

    invalid_transition = "invalid_transition"
    missing_required_context = "missing_required_context"
    unknown_document_type = "unknown_document_type"
    concurrent_modification = "concurrent_modification"
    requirement_not_found = "requirement_not_found"
    unknown_package = "unknown_package"


class RequirementEngineError(Exception):
    """Base error for the requirement engine."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidTransition(RequirementEngineError):
    """The (from, to) pair is not in the transition table."""

    kind = ErrorKind.invalid_transition

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"Invalid transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class MissingRequiredContext(RequirementEngineError):
    """A transition was requested without the context it needs."""

    kind = ErrorKind.missing_required_context

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class UnknownDocumentType(RequirementEngineError):
    """The referenced document type code is not in the catalog."""

    kind = ErrorKind.unknown_document_type

    def __init__(self, code: str) -> None:
        super().__init__(f"Unknown document type: {code}")
        self.code = code


class ConcurrentModification(RequirementEngineError):
    """A conditional write lost against a concurrent writer."""

    kind = ErrorKind.concurrent_modification

    def __init__(self, requirement_id: object, expected_version: int) -> None:
        super().__init__(
            f"Requirement {requirement_id} changed concurrently "
            f"(expected version {expected_version})"
        )
        self.requirement_id = requirement_id
        self.expected_version = expected_version


class RequirementNotFound(RequirementEngineError):
    """No requirement exists with the given id."""

    kind = ErrorKind.requirement_not_found

    def __init__(self, requirement_id: object) -> None:
        super().__init__(f"Requirement not found: {requirement_id}")
        self.requirement_id = requirement_id


class UnknownPackage(RequirementEngineError):
    """The referenced compliance package does not exist."""

    kind = ErrorKind.unknown_package

    def __init__(self, package_id: str) -> None:
        super().__init__(f"Unknown compliance package: {package_id}")
        self.package_id = package_id
