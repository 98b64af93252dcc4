"""Run the scheduling sweep against the configured database."""

import argparse
import logging

from backend.compliance.config import get_settings
from backend.compliance.db.engine import create_engine_from_settings, create_session_factory
from backend.compliance.db.sql_repositories import SqlAuditSink, SqlRequirementRepository
from backend.compliance.lifecycle.service import RequirementService
from backend.compliance.scheduling.scheduler import SweepScheduler
from backend.compliance.utils.clock import SystemClock


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply due expiry transitions")
    parser.add_argument("--once", action="store_true", help="Run a single sweep and exit")
    parser.add_argument("--interval", type=int, default=None, help="Seconds between sweeps")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    settings = get_settings()
    session_factory = create_session_factory(create_engine_from_settings(settings))

    with session_factory() as session:
        # One session is shared by all sweep workers, so sweep sequentially.
        service = RequirementService(
            repository=SqlRequirementRepository(session),
            audit_sink=SqlAuditSink(session),
            clock=SystemClock(),
            settings=settings.model_copy(update={"sweep_max_workers": 1}),
        )
        scheduler = SweepScheduler(service, interval_seconds=args.interval)

        if args.once:
            applied = scheduler.run_once()
            print(f"applied={len(applied)}")
            return

        try:
            scheduler.run_forever()
        except KeyboardInterrupt:
            scheduler.stop()


if __name__ == "__main__":
    main()
