"""Tests for session progression: counters, start date and explicit finish."""

from datetime import date

import pytest

from classbook.models import ClassSession
from classbook.services.error_service import NotFoundError, ValidationError
from classbook.services.meeting_service import AttendanceEntry, CloseMeetingRequest, MeetingRecorder
from classbook.services.progression_service import SessionProgressionTracker


@pytest.fixture
def running_class(factory):
    teacher = factory.teacher()
    student = factory.student()
    return factory.class_session(teacher=teacher, total_meetings=8, students=[student]), teacher, student


def _close(class_session, teacher, student):
    return MeetingRecorder().close_meeting(CloseMeetingRequest(
        session_id=class_session.id,
        assigned_instructor_id=teacher.id,
        attendance=[AttendanceEntry(student.id, 'present')]
    ))


def test_reaching_planned_count_does_not_finish(db, running_class) -> None:
    class_session, teacher, student = running_class
    for _ in range(8):
        _close(class_session, teacher, student)

    class_session = db.session.get(ClassSession, class_session.id)
    assert class_session.completed_meetings == 8
    assert class_session.end_date is None
    assert class_session.is_active is True

    progress = SessionProgressionTracker.progress(class_session)
    assert progress['remaining_meetings'] == 0
    assert progress['finished'] is False


def test_meetings_beyond_plan_are_allowed(db, running_class) -> None:
    class_session, teacher, student = running_class
    for _ in range(9):
        result = _close(class_session, teacher, student)
    assert result['sequence_number'] == 9


def test_finish_sets_end_date_and_deactivates(db, running_class) -> None:
    class_session, teacher, student = running_class
    _close(class_session, teacher, student)

    finished = SessionProgressionTracker.finish(class_session.id, date(2026, 3, 31))

    assert finished.end_date == date(2026, 3, 31)
    assert finished.is_active is False
    assert finished.completed_meetings == 1


def test_finish_twice_is_rejected(db, running_class) -> None:
    class_session, _, _ = running_class
    SessionProgressionTracker.finish(class_session.id)
    with pytest.raises(ValidationError):
        SessionProgressionTracker.finish(class_session.id)


def test_finish_unknown_class(db) -> None:
    with pytest.raises(NotFoundError):
        SessionProgressionTracker.finish(12345)


def test_advance_rejects_gaps(db, running_class) -> None:
    class_session, _, _ = running_class
    with pytest.raises(ValueError):
        SessionProgressionTracker.advance(class_session, 2)


def test_mark_started_only_once(db, running_class) -> None:
    class_session, _, _ = running_class
    assert SessionProgressionTracker.mark_started(class_session, date(2026, 1, 5)) is True
    assert SessionProgressionTracker.mark_started(class_session, date(2026, 2, 1)) is False
    assert class_session.start_date == date(2026, 1, 5)
