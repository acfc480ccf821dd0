"""
Daily moderation maintenance.

Lifts suspensions that have run out and reports how many pending spam
reports have gone stale. Meant to be run from cron or a scheduled container.
"""

import os
import sys

# Add project root to path to allow imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database.database import get_session
from app.services.spam_policy import lift_expired_suspensions
from app.services.spam_report import get_stale_reports
from app.utils.logger import setup_logging

logger = setup_logging()


def run_maintenance():
    logger.info("Starting moderation maintenance...")

    session_generator = get_session()
    db = next(session_generator)

    try:
        lifted = lift_expired_suspensions(db)
        db.commit()

        stale = get_stale_reports(db)
        if stale:
            logger.warning(
                f"{len(stale)} pending report(s) older than 7 days, "
                f"oldest is #{stale[0].id_report} from {stale[0].reported_at.isoformat()}"
            )
        logger.info(
            f"Moderation maintenance completed: {lifted} suspension(s) lifted, "
            f"{len(stale)} stale report(s)"
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Moderation maintenance failed: {e}")
        sys.exit(1)
    finally:
        session_generator.close()


if __name__ == "__main__":
    run_maintenance()
