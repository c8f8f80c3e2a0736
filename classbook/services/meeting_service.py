"""
Meeting Recorder

Closes one class meeting as a single atomic unit: allocates the next
sequence number, writes student attendance and teacher presence, freezes
the commission onto the meeting and advances the class's progression.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union

from flask import current_app

from classbook import db
from classbook.models.attendance import AttendanceRecord, TeacherPresenceRecord
from classbook.models.class_model import ClassSession, Enrollment
from classbook.models.meeting import Meeting
from classbook.models.student import Student
from classbook.models.teacher import Teacher
from classbook.services.commission_calculator import CommissionCalculator
from classbook.services.database_service import DatabaseService
from classbook.services.error_service import NotFoundError, ValidationError
from classbook.services.progression_service import SessionProgressionTracker
from classbook.utils.timezone_utils import get_local_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceEntry:
    student_id: int
    status: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class TaughtByAssigned:
    """The assigned instructor ran the meeting"""


@dataclass(frozen=True)
class TaughtBySubstitute:
    """Someone else taught; the assigned instructor is recorded absent"""
    substitute_id: int
    notes: Optional[str] = None


Instruction = Union[TaughtByAssigned, TaughtBySubstitute]


@dataclass(frozen=True)
class CloseMeetingRequest:
    session_id: int
    assigned_instructor_id: int
    attendance: List[AttendanceEntry]
    assigned_instructor_present: bool = True
    taught_by: Instruction = field(default_factory=TaughtByAssigned)
    topic: Optional[str] = None


class MeetingRecorder:

    def close_meeting(self, request: CloseMeetingRequest) -> dict:
        """
        Close the next meeting of a class.

        Returns:
            {'meeting_id', 'sequence_number', 'present_count',
             'commission': {'amount', 'breakdown', 'policy'}}

        Raises:
            ValidationError: nobody present-equivalent, inactive class,
                instructor mismatch
            NotFoundError: unknown class or instructor
            ConflictError: lost the race for the sequence number on every attempt
        """
        if CommissionCalculator.count_eligible(entry.status for entry in request.attendance) == 0:
            raise ValidationError("At least one student must be present to record a meeting",
                                  'attendance_records')

        return DatabaseService.run_with_retry(
            lambda: self._close_once(request),
            f"close meeting for class {request.session_id}"
        )

    def _close_once(self, request: CloseMeetingRequest) -> dict:
        tracker = SessionProgressionTracker
        class_session = tracker.load_for_update(request.session_id)
        if not class_session.is_active or class_session.is_finished:
            raise ValidationError(f"Class {class_session.id} is not active")

        assigned = self._resolve_instructors(class_session, request)

        # Drop students that are not enrolled (stale client state)
        enrollments = {
            enrollment.student_id: enrollment
            for enrollment in Enrollment.query.filter_by(class_session_id=class_session.id).all()
        }
        accepted = []
        for entry in request.attendance:
            if entry.student_id not in enrollments:
                logger.warning(f"Student {entry.student_id} is not enrolled in class {class_session.id}, skipping")
                continue
            accepted.append(entry)

        statuses = [entry.status for entry in accepted]
        present_count = CommissionCalculator.count_eligible(statuses)
        if present_count == 0:
            raise ValidationError("At least one enrolled student must be present to record a meeting",
                                  'attendance_records')

        sequence_number = tracker.next_sequence_number(class_session)
        commission = CommissionCalculator.calculate(
            class_session.commission_policy, statuses,
            current_app.config.get('CURRENCY_SYMBOL', 'Rp')
        )

        now = get_local_time()
        recorded_at = datetime.utcnow()
        substitute_id = (request.taught_by.substitute_id
                         if isinstance(request.taught_by, TaughtBySubstitute) else None)

        meeting = Meeting(
            class_session_id=class_session.id,
            sequence_number=sequence_number,
            date=now,
            topic=request.topic or f"Meeting {sequence_number}",
            status='closed',
            substitute_teacher_id=substitute_id,
            actual_teacher_id=self._actual_teacher_id(request),
            commission_type=commission.policy,
            calculated_commission=commission.amount,
            present_count=present_count,
            notes=f"Attendance recorded: {present_count} students present"
        )
        meeting.set_commission_breakdown(commission.breakdown)

        for entry in accepted:
            meeting.attendance_records.append(AttendanceRecord(
                student_id=entry.student_id,
                enrollment_id=enrollments[entry.student_id].id,
                status=entry.status,
                notes=entry.notes,
                recorded_at=recorded_at
            ))

        for presence in self._presence_records(request, assigned, recorded_at):
            meeting.teacher_presence_records.append(presence)

        tracker.advance(class_session, sequence_number)
        tracker.mark_started(class_session, now.date())

        db.session.add(meeting)
        DatabaseService.commit()

        logger.info(f"Closed meeting {sequence_number} of class {class_session.id}: "
                    f"{present_count} present, commission {commission.amount} ({commission.policy})")

        return {
            'meeting_id': meeting.id,
            'sequence_number': sequence_number,
            'present_count': present_count,
            'commission': {
                'amount': commission.amount,
                'breakdown': commission.breakdown,
                'policy': commission.policy
            }
        }

    def _resolve_instructors(self, class_session: ClassSession, request: CloseMeetingRequest) -> Teacher:
        assigned = db.session.get(Teacher, request.assigned_instructor_id)
        if assigned is None:
            raise NotFoundError('Teacher', request.assigned_instructor_id)
        if class_session.teacher_id is not None and class_session.teacher_id != assigned.id:
            raise ValidationError(
                f"Teacher {assigned.id} is not the assigned instructor of class {class_session.id}",
                'assigned_instructor_id')

        if isinstance(request.taught_by, TaughtBySubstitute):
            substitute = db.session.get(Teacher, request.taught_by.substitute_id)
            if substitute is None:
                raise NotFoundError('Teacher', request.taught_by.substitute_id)
            if substitute.id == assigned.id:
                raise ValidationError("The substitute must be a different instructor",
                                      'substitution.substitute_instructor_id')
        return assigned

    @staticmethod
    def _actual_teacher_id(request: CloseMeetingRequest) -> Optional[int]:
        """Whoever really taught; nobody when the assigned instructor was absent unreplaced"""
        taught_by = request.taught_by
        if isinstance(taught_by, TaughtBySubstitute):
            return taught_by.substitute_id
        if isinstance(taught_by, TaughtByAssigned):
            return request.assigned_instructor_id if request.assigned_instructor_present else None
        raise TypeError(f"Unhandled instruction: {taught_by!r}")

    @staticmethod
    def _presence_records(request: CloseMeetingRequest, assigned: Teacher, recorded_at) -> List[TeacherPresenceRecord]:
        taught_by = request.taught_by
        if isinstance(taught_by, TaughtBySubstitute):
            return [
                TeacherPresenceRecord(
                    teacher_id=assigned.id,
                    status='absent',
                    is_substitute=False,
                    notes='Absent, replaced by a substitute instructor',
                    recorded_at=recorded_at
                ),
                TeacherPresenceRecord(
                    teacher_id=taught_by.substitute_id,
                    status='present',
                    is_substitute=True,
                    notes=taught_by.notes or f"Substituting for {assigned.name}",
                    recorded_at=recorded_at
                ),
            ]
        if isinstance(taught_by, TaughtByAssigned):
            return [
                TeacherPresenceRecord(
                    teacher_id=assigned.id,
                    status='present' if request.assigned_instructor_present else 'absent',
                    is_substitute=False,
                    recorded_at=recorded_at
                )
            ]
        raise TypeError(f"Unhandled instruction: {taught_by!r}")

    @staticmethod
    def list_meetings(session_id) -> List[Meeting]:
        """Meetings of a class in sequence order"""
        if db.session.get(ClassSession, session_id) is None:
            raise NotFoundError('Class', session_id)
        return (Meeting.query
                .filter_by(class_session_id=session_id)
                .order_by(Meeting.sequence_number.asc())
                .all())

    @staticmethod
    def enroll(session_id, student_id) -> Enrollment:
        """Join a student to a class; enrolling twice returns the existing row"""
        if db.session.get(ClassSession, session_id) is None:
            raise NotFoundError('Class', session_id)
        if db.session.get(Student, student_id) is None:
            raise NotFoundError('Student', student_id)

        def _enroll():
            existing = Enrollment.query.filter_by(class_session_id=session_id, student_id=student_id).first()
            if existing is not None:
                return existing
            enrollment = Enrollment(class_session_id=session_id, student_id=student_id)
            db.session.add(enrollment)
            DatabaseService.commit()
            logger.info(f"Enrolled student {student_id} in class {session_id}")
            return enrollment

        return DatabaseService.run_with_retry(_enroll, f"enroll student {student_id}")
