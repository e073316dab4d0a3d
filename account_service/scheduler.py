# account_service/scheduler.py

from datetime import datetime, timezone
from .database import SessionLocal
from . import models
import logging

logger = logging.getLogger(__name__)


def expire_premium_memberships(session_factory=SessionLocal) -> int:
    """
    Clears the premium flag on every user whose membership has expired.

    Returns:
        int: The number of users downgraded.
    """
    db = session_factory()
    try:
        now = datetime.now(timezone.utc)
        logger.info(f"Starting premium expiry sweep at {now.strftime('%Y-%m-%d %H:%M')} UTC.")

        expired_count = (
            db.query(models.User)
            .filter(
                models.User.is_premium.is_(True),
                models.User.premium_expired_at.isnot(None),
                models.User.premium_expired_at < now,
            )
            .update({models.User.is_premium: False}, synchronize_session=False)
        )

        db.commit()
        logger.info(f"Premium expiry sweep complete. Downgraded {expired_count} users.")
        return expired_count

    except Exception as e:
        logger.error(f"Error during premium expiry sweep: {e}")
        db.rollback()
        return 0
    finally:
        db.close()
