"""Mapping of engine errors onto HTTP responses."""

from fastapi import Request
from fastapi.responses import JSONResponse

from backend.compliance.errors import ErrorKind, RequirementEngineError

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.requirement_not_found: 404,
    ErrorKind.unknown_package: 404,
    ErrorKind.invalid_transition: 409,
    ErrorKind.concurrent_modification: 409,
    ErrorKind.missing_required_context: 422,
    ErrorKind.unknown_document_type: 422,
}


async def engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a RequirementEngineError as {"error": {"kind", "message"}}."""
    assert isinstance(exc, RequirementEngineError)
    return JSONResponse(
        status_code=ERROR_STATUS[exc.kind],
        content={"error": {"kind": exc.kind.value, "message": exc.message}},
    )
