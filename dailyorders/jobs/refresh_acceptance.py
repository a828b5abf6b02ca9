"""Periodic job: normalize store acceptance overrides.

Run from cron around each store's business start and cutoff::

    python -m dailyorders.jobs.refresh_acceptance
"""

import logging

from dailyorders.core.config import settings
from dailyorders.db import session as db_session
from dailyorders.services.store_service import refresh_acceptance_overrides

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(level=settings.log_level.upper())
    with db_session.SessionLocal() as session:
        changed = refresh_acceptance_overrides(session)
    logger.info("Acceptance refresh finished, %s store(s) updated", changed)
    return changed


if __name__ == "__main__":
    main()
