"""Tests for teacher commission reporting over frozen meeting amounts."""

from datetime import datetime
from decimal import Decimal

import pytest

from classbook.models import Meeting
from classbook.services.commission_report_service import CommissionReport
from classbook.services.error_service import NotFoundError
from classbook.services.meeting_service import (
    AttendanceEntry,
    CloseMeetingRequest,
    MeetingRecorder,
    TaughtBySubstitute,
)
from classbook.utils.timezone_utils import month_bounds


@pytest.fixture
def setup(factory):
    rina = factory.teacher(name='Rina')
    budi = factory.teacher(name='Budi')
    students = [factory.student(name=f"Student {i}") for i in range(3)]
    flat = factory.class_session(teacher=rina, commission_type='BY_CLASS',
                                 commission_amount='50000', students=students)
    per_student = factory.class_session(teacher=budi, commission_type='BY_STUDENT',
                                        commission_amount='10000', students=students)
    return rina, budi, flat, per_student, students


def _close(class_session, teacher, students, statuses, **kwargs):
    return MeetingRecorder().close_meeting(CloseMeetingRequest(
        session_id=class_session.id,
        assigned_instructor_id=teacher.id,
        attendance=[AttendanceEntry(s.id, status) for s, status in zip(students, statuses)],
        **kwargs
    ))


def test_teacher_report_totals(db, setup) -> None:
    rina, budi, flat, per_student, students = setup
    _close(flat, rina, students, ['present', 'present', 'absent'])
    _close(flat, rina, students, ['present', 'absent', 'absent'])

    report = CommissionReport.teacher_report(rina.id)

    assert report['total_commission'] == Decimal('100000')
    assert report['total_meetings'] == 2
    assert report['total_students'] == 3
    assert report['by_policy']['BY_CLASS']['meetings'] == 2
    assert report['by_policy']['BY_STUDENT']['meetings'] == 0
    assert [line['sequence_number'] for line in report['meetings']] == [1, 2]


def test_substitute_is_credited(db, setup) -> None:
    rina, budi, flat, per_student, students = setup
    _close(per_student, budi, students, ['present', 'late', 'present'],
           taught_by=TaughtBySubstitute(substitute_id=rina.id))

    rina_report = CommissionReport.teacher_report(rina.id)
    budi_report = CommissionReport.teacher_report(budi.id)

    assert rina_report['total_commission'] == Decimal('30000')
    assert rina_report['substitute_meetings'] == 1
    assert budi_report['total_commission'] == Decimal('0')
    assert budi_report['total_meetings'] == 0


def test_month_filter(db, setup) -> None:
    rina, budi, flat, per_student, students = setup
    old = _close(flat, rina, students, ['present'])
    _close(flat, rina, students, ['present'])

    meeting = db.session.get(Meeting, old['meeting_id'])
    meeting.date = datetime(2025, 11, 30, 23, 59)
    db.session.commit()

    november = CommissionReport.teacher_report(rina.id, 11, 2025)
    assert november['total_meetings'] == 1
    assert november['total_commission'] == Decimal('50000')

    december = CommissionReport.teacher_report(rina.id, 12, 2025)
    assert december['total_meetings'] == 0


def test_summary_orders_by_commission(db, setup) -> None:
    rina, budi, flat, per_student, students = setup
    _close(flat, rina, students, ['present'])
    _close(per_student, budi, students, ['present', 'present', 'present'])

    summary = CommissionReport.summary()

    assert [row['teacher_name'] for row in summary['teachers']] == ['Rina', 'Budi']
    assert summary['grand_total'] == Decimal('80000')
    assert summary['total_meetings'] == 2


def test_unassigned_absence_credits_nobody(db, setup) -> None:
    rina, budi, flat, per_student, students = setup
    _close(flat, rina, students, ['present'], assigned_instructor_present=False)

    assert CommissionReport.summary()['teachers'] == []
    assert CommissionReport.teacher_report(rina.id)['total_commission'] == Decimal('0')


def test_unknown_teacher(db) -> None:
    with pytest.raises(NotFoundError):
        CommissionReport.teacher_report(42)


@pytest.mark.parametrize('month, year, expected_end', [
    (2, 2024, datetime(2024, 3, 1)),
    (12, 2025, datetime(2026, 1, 1)),
])
def test_month_bounds(month, year, expected_end) -> None:
    start, end = month_bounds(month, year)
    assert start == datetime(year, month, 1)
    assert end == expected_end
