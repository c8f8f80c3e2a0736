"""
Database Service Layer for transactional writes
Centralizes commit, rollback and lost-race handling for the write paths
"""
import logging
from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from classbook import db
from classbook.services.error_service import ConflictError

logger = logging.getLogger(__name__)


class DatabaseService:
    """Centralized transaction handling"""

    @staticmethod
    def commit():
        """
        Commit the current unit of work as one atomic step.

        A version-counter mismatch or a unique-key collision means a
        concurrent writer committed first; both roll back and surface as a
        retriable ConflictError. Any other failure rolls back and propagates.
        """
        try:
            db.session.commit()
        except (StaleDataError, IntegrityError) as e:
            db.session.rollback()
            logger.warning(f"Commit lost a concurrent update: {type(e).__name__}: {e}")
            raise ConflictError() from e
        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def run_with_retry(operation, label, retries=None):
        """
        Run operation() until it commits, re-running it from a fresh read
        after each lost race.

        Args:
            operation: Callable performing reads, writes and DatabaseService.commit()
            label: Short description for the log
            retries: Extra attempts after the first; defaults to COMMIT_CONFLICT_RETRIES

        Returns:
            Whatever operation() returns
        """
        if retries is None:
            retries = current_app.config.get('COMMIT_CONFLICT_RETRIES', 3)

        attempt = 0
        while True:
            try:
                return operation()
            except ConflictError:
                db.session.rollback()
                attempt += 1
                if attempt > retries:
                    logger.warning(f"{label}: giving up after {attempt} conflicting attempts")
                    raise
                logger.warning(f"{label}: concurrent update detected, retrying ({attempt}/{retries})")
