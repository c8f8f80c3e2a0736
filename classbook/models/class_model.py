from datetime import datetime
from decimal import Decimal
from classbook import db
from classbook.services.commission_calculator import policy_from_settings

class ClassSession(db.Model):
    __tablename__ = 'class_sessions'

    id = db.Column(db.Integer, primary_key=True)

    # Class Basic Information
    name = db.Column(db.String(150), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), index=True)
    schedule = db.Column(db.String(200))  # free text, e.g. "Mon & Wed 16:00-17:30"

    # Assignments
    teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), index=True)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id'))

    # Progression
    total_meetings = db.Column(db.Integer, nullable=False, default=8)
    completed_meetings = db.Column(db.Integer, nullable=False, default=0)
    start_date = db.Column(db.Date)  # set when the first meeting closes
    end_date = db.Column(db.Date)  # set only by the explicit finish action
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    # Commission policy
    commission_type = db.Column(db.String(20), nullable=False, default='BY_CLASS')  # BY_CLASS, BY_STUDENT
    commission_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    # Optimistic lock counter, bumped on every flush of this row
    version_id = db.Column(db.Integer, nullable=False)

    # Tracking
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    teacher = db.relationship('Teacher', backref='class_sessions', lazy=True)
    room = db.relationship('Room', backref='class_sessions', lazy=True)
    course = db.relationship('Course', backref='class_sessions', lazy=True)
    enrollments = db.relationship('Enrollment', backref='class_session', lazy=True,
                                  cascade='all, delete-orphan')

    __mapper_args__ = {'version_id_col': version_id}

    def __init__(self, **kwargs):
        super(ClassSession, self).__init__(**kwargs)

    @property
    def commission_policy(self):
        """Current policy as a tagged variant (FlatPerMeeting or PerStudent)"""
        return policy_from_settings(self.commission_type, Decimal(self.commission_amount or 0))

    @property
    def is_finished(self):
        return self.end_date is not None

    @property
    def is_started(self):
        return self.start_date is not None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'course_id': self.course_id,
            'schedule': self.schedule,
            'teacher_id': self.teacher_id,
            'teacher_name': self.teacher.name if self.teacher else None,
            'room_id': self.room_id,
            'room_name': self.room.name if self.room else None,
            'total_meetings': self.total_meetings,
            'completed_meetings': self.completed_meetings,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'is_active': self.is_active,
            'commission_type': self.commission_type,
            'commission_amount': float(self.commission_amount or 0),
            'student_count': len(self.enrollments)
        }

    def __repr__(self):
        return f'<ClassSession {self.name}>'


class Enrollment(db.Model):
    __tablename__ = 'enrollments'

    id = db.Column(db.Integer, primary_key=True)
    class_session_id = db.Column(db.Integer, db.ForeignKey('class_sessions.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship('Student', backref='enrollments', lazy=True)

    __table_args__ = (
        db.UniqueConstraint('class_session_id', 'student_id', name='uq_enrollment_session_student'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'class_session_id': self.class_session_id,
            'student_id': self.student_id,
            'student_name': self.student.name if self.student else None,
            'joined_at': self.joined_at.isoformat() if self.joined_at else None
        }

    def __repr__(self):
        return f'<Enrollment session={self.class_session_id} student={self.student_id}>'
