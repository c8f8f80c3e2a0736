from datetime import datetime
from classbook import db
from classbook.services.commission_calculator import PRESENT_EQUIVALENT_STATUSES

ATTENDANCE_STATUSES = ('present', 'absent', 'late', 'excused')

# Statuses counted as "the student showed up"
PRESENT_EQUIVALENT = PRESENT_EQUIVALENT_STATUSES

TEACHER_PRESENCE_STATUSES = ('present', 'absent')


def is_present_equivalent(status):
    return status in PRESENT_EQUIVALENT


class AttendanceRecord(db.Model):
    """One student's status at one closed meeting. Append-only."""
    __tablename__ = 'attendance_records'

    id = db.Column(db.Integer, primary_key=True)
    meeting_id = db.Column(db.Integer, db.ForeignKey('meetings.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    enrollment_id = db.Column(db.Integer, db.ForeignKey('enrollments.id'), nullable=False)

    status = db.Column(db.String(20), nullable=False)  # present, absent, late, excused
    notes = db.Column(db.Text)
    recorded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student = db.relationship('Student', lazy=True)

    __table_args__ = (
        db.UniqueConstraint('meeting_id', 'student_id', name='uq_attendance_meeting_student'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'meeting_id': self.meeting_id,
            'student_id': self.student_id,
            'student_name': self.student.name if self.student else None,
            'status': self.status,
            'notes': self.notes,
            'recorded_at': self.recorded_at.isoformat() if self.recorded_at else None
        }

    def __repr__(self):
        return f'<AttendanceRecord meeting={self.meeting_id} student={self.student_id} {self.status}>'


class TeacherPresenceRecord(db.Model):
    """Assigned instructor and/or substitute at one closed meeting. Append-only."""
    __tablename__ = 'teacher_presence_records'

    id = db.Column(db.Integer, primary_key=True)
    meeting_id = db.Column(db.Integer, db.ForeignKey('meetings.id'), nullable=False, index=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), nullable=False, index=True)

    status = db.Column(db.String(20), nullable=False)  # present, absent
    is_substitute = db.Column(db.Boolean, default=False, nullable=False)
    notes = db.Column(db.Text)
    recorded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    teacher = db.relationship('Teacher', lazy=True)

    __table_args__ = (
        db.UniqueConstraint('meeting_id', 'teacher_id', name='uq_presence_meeting_teacher'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'meeting_id': self.meeting_id,
            'teacher_id': self.teacher_id,
            'teacher_name': self.teacher.name if self.teacher else None,
            'status': self.status,
            'is_substitute': self.is_substitute,
            'notes': self.notes,
            'recorded_at': self.recorded_at.isoformat() if self.recorded_at else None
        }

    def __repr__(self):
        return f'<TeacherPresenceRecord meeting={self.meeting_id} teacher={self.teacher_id} {self.status}>'
