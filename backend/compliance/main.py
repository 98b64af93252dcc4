"""FastAPI application."""

from fastapi import FastAPI

from backend.compliance.api.errors import engine_error_handler
from backend.compliance.api.routes.health import router as health_router
from backend.compliance.api.routes.metrics import router as metrics_router
from backend.compliance.api.routes.packages import router as packages_router
from backend.compliance.api.routes.requirements import router as requirements_router
from backend.compliance.api.routes.sweeps import router as sweeps_router
from backend.compliance.errors import RequirementEngineError

app = FastAPI(title="Compliance Requirement Engine", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(requirements_router)
app.include_router(packages_router)
app.include_router(sweeps_router)

app.add_exception_handler(RequirementEngineError, engine_error_handler)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Compliance Requirement Engine", "version": "0.1.0"}
