"""
Teacher commission reporting

Reads the commission frozen on each closed meeting and credits it to whoever
actually taught. Nothing is recalculated here; changing a class's policy
later never rewrites past earnings.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import joinedload

from classbook import db
from classbook.models.meeting import Meeting
from classbook.models.teacher import Teacher
from classbook.services.commission_calculator import COMMISSION_TYPES, CommissionCalculator
from classbook.services.error_service import NotFoundError
from classbook.utils.timezone_utils import month_bounds


def _meetings_query(month: Optional[int], year: Optional[int]):
    query = Meeting.query.filter(Meeting.actual_teacher_id.isnot(None))
    if month and year:
        start, end = month_bounds(month, year)
        query = query.filter(Meeting.date >= start, Meeting.date < end)
    return query


def _totals(meetings: List[Meeting]) -> Dict:
    by_policy = {policy: {'meetings': 0, 'amount': Decimal('0')} for policy in COMMISSION_TYPES}
    for meeting in meetings:
        bucket = by_policy.setdefault(meeting.commission_type or 'UNKNOWN',
                                      {'meetings': 0, 'amount': Decimal('0')})
        bucket['meetings'] += 1
        bucket['amount'] += Decimal(meeting.calculated_commission or 0)

    return {
        'total_commission': CommissionCalculator.total_commission(meetings),
        'total_meetings': len(meetings),
        'total_students': sum(meeting.present_count or 0 for meeting in meetings),
        'substitute_meetings': sum(1 for meeting in meetings if meeting.is_substitution),
        'by_policy': by_policy
    }


class CommissionReport:

    @staticmethod
    def teacher_report(teacher_id, month: Optional[int] = None, year: Optional[int] = None) -> Dict:
        """
        Commission earned by one teacher, optionally for a single month.

        Returns:
            Totals plus the per-meeting lines, oldest first
        """
        teacher = db.session.get(Teacher, teacher_id)
        if teacher is None:
            raise NotFoundError('Teacher', teacher_id)

        meetings = (_meetings_query(month, year)
                    .filter(Meeting.actual_teacher_id == teacher_id)
                    .options(joinedload(Meeting.class_session))
                    .order_by(Meeting.date.asc(), Meeting.id.asc())
                    .all())

        report = {
            'teacher_id': teacher.id,
            'teacher_name': teacher.name,
            'month': month,
            'year': year,
            'meetings': [
                {
                    'meeting_id': meeting.id,
                    'class_session_id': meeting.class_session_id,
                    'class_name': meeting.class_session.name if meeting.class_session else None,
                    'sequence_number': meeting.sequence_number,
                    'date': meeting.date.isoformat() if meeting.date else None,
                    'commission_type': meeting.commission_type,
                    'present_count': meeting.present_count,
                    'amount': Decimal(meeting.calculated_commission or 0),
                    'is_substitute': meeting.is_substitution,
                    'breakdown': meeting.get_commission_breakdown()
                }
                for meeting in meetings
            ]
        }
        report.update(_totals(meetings))
        return report

    @staticmethod
    def summary(month: Optional[int] = None, year: Optional[int] = None) -> Dict:
        """Commission totals for every teacher who taught in the period, highest first"""
        meetings = _meetings_query(month, year).all()

        grouped = {}
        for meeting in meetings:
            grouped.setdefault(meeting.actual_teacher_id, []).append(meeting)

        teachers = {teacher.id: teacher for teacher in
                    Teacher.query.filter(Teacher.id.in_(list(grouped))).all()} if grouped else {}

        rows = []
        for teacher_id, teacher_meetings in grouped.items():
            row = {
                'teacher_id': teacher_id,
                'teacher_name': teachers[teacher_id].name if teacher_id in teachers else None
            }
            row.update(_totals(teacher_meetings))
            rows.append(row)
        rows.sort(key=lambda row: (-row['total_commission'], row['teacher_id']))

        return {
            'month': month,
            'year': year,
            'teachers': rows,
            'grand_total': CommissionCalculator.total_commission(meetings),
            'total_meetings': len(meetings)
        }
