"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - requirement_transitions_total{from_status, to_status}
    - requirement_transition_errors_total{kind}
    - requirement_sweep_duration_ms
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
