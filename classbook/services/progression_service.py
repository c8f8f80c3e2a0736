"""
Session Progression Tracker

Owns a class session's meeting counter and its start/finish dates.
Reaching the planned meeting count never finishes a session; finishing is
the separate administrative action `finish`.
"""
import logging

from classbook import db
from classbook.models.class_model import ClassSession
from classbook.services.database_service import DatabaseService
from classbook.services.error_service import NotFoundError, ValidationError
from classbook.utils.timezone_utils import get_local_date

logger = logging.getLogger(__name__)


class SessionProgressionTracker:

    @staticmethod
    def load_for_update(session_id) -> ClassSession:
        """
        Read the session inside the current transaction, taking a row lock
        where the database supports it. The version counter covers the rest.
        """
        class_session = (db.session.query(ClassSession)
                         .filter(ClassSession.id == session_id)
                         .with_for_update()
                         .first())
        if class_session is None:
            raise NotFoundError('Class', session_id)
        return class_session

    @staticmethod
    def next_sequence_number(class_session: ClassSession) -> int:
        return (class_session.completed_meetings or 0) + 1

    @staticmethod
    def advance(class_session: ClassSession, sequence_number: int):
        """Record that meeting `sequence_number` is closed. Does not touch end_date."""
        expected = SessionProgressionTracker.next_sequence_number(class_session)
        if sequence_number != expected:
            raise ValueError(
                f"Class {class_session.id} expects meeting {expected}, got {sequence_number}")
        class_session.completed_meetings = sequence_number

    @staticmethod
    def mark_started(class_session: ClassSession, on_date=None):
        """Set the start date once; later calls are no-ops"""
        if class_session.start_date is None:
            class_session.start_date = on_date or get_local_date()
            return True
        return False

    @staticmethod
    def finish(session_id, on_date=None) -> ClassSession:
        """Explicitly complete a class: set its finish date and deactivate it"""
        def _finish():
            class_session = SessionProgressionTracker.load_for_update(session_id)
            if class_session.end_date is not None:
                raise ValidationError("Class has already been completed")
            class_session.end_date = on_date or get_local_date()
            class_session.is_active = False
            DatabaseService.commit()
            logger.info(f"Class {session_id} completed after {class_session.completed_meetings}"
                        f"/{class_session.total_meetings} meetings")
            return class_session

        return DatabaseService.run_with_retry(_finish, f"finish class {session_id}")

    @staticmethod
    def progress(class_session: ClassSession) -> dict:
        completed = class_session.completed_meetings or 0
        total = class_session.total_meetings or 0
        return {
            'class_session_id': class_session.id,
            'total_meetings': total,
            'completed_meetings': completed,
            'remaining_meetings': max(0, total - completed),
            'next_sequence_number': completed + 1,
            'started': class_session.is_started,
            'finished': class_session.is_finished,
            'start_date': class_session.start_date.isoformat() if class_session.start_date else None,
            'end_date': class_session.end_date.isoformat() if class_session.end_date else None,
            'is_active': class_session.is_active
        }
