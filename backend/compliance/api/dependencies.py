"""FastAPI dependencies wiring the lifecycle service to a backend.

With DATABASE_URL set, each request gets SQL repositories on its own
session. Without it, a process-wide in-memory service is used.
"""

from collections.abc import Generator
from functools import lru_cache

from backend.compliance.config import get_settings
from backend.compliance.db.engine import create_session_factory, get_engine
from backend.compliance.db.inmemory import InMemoryAuditSink, InMemoryRequirementRepository
from backend.compliance.db.sql_repositories import SqlAuditSink, SqlRequirementRepository
from backend.compliance.lifecycle.service import RequirementService
from backend.compliance.utils.clock import SystemClock


@lru_cache
def get_inmemory_service() -> RequirementService:
    """Process-wide service over in-memory repositories."""
    audit_sink = InMemoryAuditSink()
    return RequirementService(
        repository=InMemoryRequirementRepository(audit_sink),
        audit_sink=audit_sink,
        clock=SystemClock(),
    )


def get_requirement_service() -> Generator[RequirementService, None, None]:
    """FastAPI dependency for the requirement lifecycle service.

    Yields:
        RequirementService bound to the configured backend
    """
    settings = get_settings()
    if not settings.database_url:
        yield get_inmemory_service()
        return

    with create_session_factory(get_engine())() as session:
        yield RequirementService(
            repository=SqlRequirementRepository(session),
            audit_sink=SqlAuditSink(session),
            clock=SystemClock(),
            settings=settings,
        )
