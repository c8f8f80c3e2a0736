"""
Attendance Ledger reads

Student attendance and teacher presence are append-only; this module only
reads them back for reporting. Every read goes through the normal session,
so a committed close-meeting is visible immediately.
"""
from collections import Counter
from typing import Dict, List, Optional

from sqlalchemy.orm import selectinload

from classbook import db
from classbook.models.attendance import (
    ATTENDANCE_STATUSES,
    AttendanceRecord,
    TeacherPresenceRecord,
    is_present_equivalent,
)
from classbook.models.class_model import ClassSession
from classbook.models.meeting import Meeting
from classbook.models.student import Student
from classbook.models.teacher import Teacher
from classbook.services.error_service import NotFoundError
from classbook.utils.timezone_utils import month_bounds


def _newest_first(query):
    return query.order_by(Meeting.date.desc(), Meeting.sequence_number.desc(), Meeting.id.desc())


def _with_rows(query):
    return query.options(selectinload(Meeting.attendance_records),
                         selectinload(Meeting.teacher_presence_records))


class AttendanceLedger:

    @staticmethod
    def session_history(session_id) -> List[Meeting]:
        """All meetings of a class with their attendance rows, newest first"""
        if db.session.get(ClassSession, session_id) is None:
            raise NotFoundError('Class', session_id)
        query = Meeting.query.filter(Meeting.class_session_id == session_id)
        return _with_rows(_newest_first(query)).all()

    @staticmethod
    def teacher_history(teacher_id, month: Optional[int] = None, year: Optional[int] = None) -> List[Meeting]:
        """Meetings where the teacher has a presence row (taught, absent or substituting), newest first"""
        if db.session.get(Teacher, teacher_id) is None:
            raise NotFoundError('Teacher', teacher_id)
        query = (Meeting.query
                 .join(TeacherPresenceRecord, TeacherPresenceRecord.meeting_id == Meeting.id)
                 .filter(TeacherPresenceRecord.teacher_id == teacher_id))
        if month and year:
            start, end = month_bounds(month, year)
            query = query.filter(Meeting.date >= start, Meeting.date < end)
        return _with_rows(_newest_first(query)).all()

    @staticmethod
    def student_history(student_id) -> List[AttendanceRecord]:
        """One student's attendance rows across all classes, newest meeting first"""
        if db.session.get(Student, student_id) is None:
            raise NotFoundError('Student', student_id)
        return (AttendanceRecord.query
                .join(Meeting, AttendanceRecord.meeting_id == Meeting.id)
                .filter(AttendanceRecord.student_id == student_id)
                .order_by(Meeting.date.desc(), Meeting.id.desc())
                .all())

    @staticmethod
    def session_stats(session_id) -> Dict:
        """Per-status counts and attendance rate for a class"""
        if db.session.get(ClassSession, session_id) is None:
            raise NotFoundError('Class', session_id)
        rows = (db.session.query(AttendanceRecord.status, db.func.count(AttendanceRecord.id))
                .join(Meeting, AttendanceRecord.meeting_id == Meeting.id)
                .filter(Meeting.class_session_id == session_id)
                .group_by(AttendanceRecord.status)
                .all())
        counts = {status: 0 for status in ATTENDANCE_STATUSES}
        counts.update({status: count for status, count in rows})
        total = sum(counts.values())
        attended = sum(count for status, count in counts.items() if is_present_equivalent(status))
        meeting_count = Meeting.query.filter_by(class_session_id=session_id).count()
        return {
            'class_session_id': session_id,
            'meeting_count': meeting_count,
            'total_records': total,
            'status_counts': counts,
            'present_equivalent': attended,
            'attendance_rate': round(attended / total * 100, 1) if total else 0.0
        }

    @staticmethod
    def teacher_stats(teacher_id, month: Optional[int] = None, year: Optional[int] = None) -> Dict:
        """Taught, absent and substitute meeting counts for one teacher"""
        meetings = AttendanceLedger.teacher_history(teacher_id, month, year)
        counts = Counter()
        for meeting in meetings:
            for record in meeting.teacher_presence_records:
                if record.teacher_id != teacher_id:
                    continue
                counts[record.status] += 1
                if record.is_substitute:
                    counts['substitute'] += 1
        total = len(meetings)
        return {
            'teacher_id': teacher_id,
            'month': month,
            'year': year,
            'total_meetings': total,
            'present': counts['present'],
            'absent': counts['absent'],
            'substitute_meetings': counts['substitute'],
            'attendance_rate': round(counts['present'] / total * 100, 1) if total else 0.0
        }
