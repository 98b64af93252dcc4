"""Structured logging for requirement transitions and sweeps."""

import logging
from typing import Any
from uuid import UUID

from backend.compliance.models.common import RequirementStatus

logger = logging.getLogger(__name__)


class StructuredTransitionLogger:
    """Structured logger for lifecycle transitions."""

    def log_transition(
        self,
        requirement_id: UUID,
        from_status: RequirementStatus,
        to_status: RequirementStatus,
        outcome: str,
        attempt: int = 1,
        error_kind: str | None = None,
        actor: str | None = None,
    ) -> None:
        """Log a transition attempt with structured data."""
        log_data: dict[str, Any] = {
            "requirement_id": str(requirement_id),
            "from": from_status.value,
            "to": to_status.value,
            "outcome": outcome,
            "attempt": attempt,
        }

        if error_kind:
            log_data["error_kind"] = error_kind
        if actor:
            log_data["actor"] = actor

        log_msg = f"Requirement transition: {from_status.value} -> {to_status.value} - {outcome}"

        if outcome == "applied":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

    def log_sweep(self, scanned: int, applied: int, conflicts: int, latency_ms: float) -> None:
        """Log a sweep summary."""
        log_data = {
            "scanned": scanned,
            "applied": applied,
            "conflicts": conflicts,
            "latency_ms": round(latency_ms, 2),
        }
        logger.info(
            f"Sweep complete: {applied} transitions applied, {scanned} scanned",
            extra={"structured": log_data},
        )
