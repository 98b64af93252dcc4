"""Periodic runner for the scheduling sweep."""

import logging
import threading

from backend.compliance.lifecycle.service import RequirementService
from backend.compliance.models.requirement import AppliedTransition
from backend.compliance.scheduling.sweep import sweep_due_transitions

logger = logging.getLogger(__name__)


class SweepScheduler:
    """Runs sweep_due_transitions at a fixed interval.

    stop() only prevents new iterations from starting; a sweep already in
    flight runs to completion.
    """

    def __init__(self, service: RequirementService, interval_seconds: int | None = None) -> None:
        self._service = service
        self._interval = interval_seconds or service.settings.sweep_interval_seconds
        self._stop = threading.Event()

    def run_once(self) -> list[AppliedTransition]:
        """Run a single sweep at the service clock's current time."""
        return sweep_due_transitions(self._service, self._service.clock.now())

    def run_forever(self) -> None:
        """Sweep until stop() is called."""
        logger.info(f"[SweepScheduler] started, interval={self._interval}s")
        while not self._stop.is_set():
            try:
                self.run_once()
            except Exception as e:
                # Next iteration recomputes everything from scratch
                logger.error(f"[SweepScheduler] sweep failed: {e}", exc_info=True)
            self._stop.wait(self._interval)
        logger.info("[SweepScheduler] stopped")

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()
