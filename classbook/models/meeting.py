from datetime import datetime
from classbook import db
import json

class Meeting(db.Model):
    __tablename__ = 'meetings'

    id = db.Column(db.Integer, primary_key=True)
    class_session_id = db.Column(db.Integer, db.ForeignKey('class_sessions.id'), nullable=False, index=True)

    # Sequence within the session, 1-based and contiguous
    sequence_number = db.Column(db.Integer, nullable=False)
    date = db.Column(db.DateTime, nullable=False, index=True)  # naive local time
    topic = db.Column(db.String(200))
    status = db.Column(db.String(20), nullable=False, default='closed')

    # Who taught
    substitute_teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), index=True)
    actual_teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), index=True)

    # Commission, frozen when the meeting is closed
    commission_type = db.Column(db.String(20))
    calculated_commission = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    commission_breakdown = db.Column(db.Text)  # JSON object
    present_count = db.Column(db.Integer, nullable=False, default=0)

    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    class_session = db.relationship('ClassSession', backref=db.backref('meetings', lazy='dynamic'))
    substitute_teacher = db.relationship('Teacher', foreign_keys=[substitute_teacher_id])
    actual_teacher = db.relationship('Teacher', foreign_keys=[actual_teacher_id])
    attendance_records = db.relationship('AttendanceRecord', backref='meeting', lazy=True,
                                         cascade='all, delete-orphan',
                                         order_by='AttendanceRecord.id')
    teacher_presence_records = db.relationship('TeacherPresenceRecord', backref='meeting', lazy=True,
                                               cascade='all, delete-orphan',
                                               order_by='TeacherPresenceRecord.id')

    __table_args__ = (
        db.UniqueConstraint('class_session_id', 'sequence_number', name='uq_meeting_session_sequence'),
    )

    def get_commission_breakdown(self):
        """Get the frozen commission explanation"""
        if self.commission_breakdown:
            try:
                return json.loads(self.commission_breakdown)
            except (ValueError, TypeError):
                return {}
        return {}

    def set_commission_breakdown(self, breakdown_dict):
        self.commission_breakdown = json.dumps(breakdown_dict)

    @property
    def is_substitution(self):
        return self.substitute_teacher_id is not None

    def to_dict(self, include_attendance=False):
        data = {
            'id': self.id,
            'class_session_id': self.class_session_id,
            'class_name': self.class_session.name if self.class_session else None,
            'sequence_number': self.sequence_number,
            'date': self.date.isoformat() if self.date else None,
            'topic': self.topic,
            'status': self.status,
            'substitute_teacher_id': self.substitute_teacher_id,
            'substitute_teacher_name': self.substitute_teacher.name if self.substitute_teacher else None,
            'actual_teacher_id': self.actual_teacher_id,
            'actual_teacher_name': self.actual_teacher.name if self.actual_teacher else None,
            'commission_type': self.commission_type,
            'calculated_commission': float(self.calculated_commission or 0),
            'commission_breakdown': self.get_commission_breakdown(),
            'present_count': self.present_count,
            'notes': self.notes
        }
        if include_attendance:
            data['attendance'] = [record.to_dict() for record in self.attendance_records]
            data['teacher_attendance'] = [record.to_dict() for record in self.teacher_presence_records]
        return data

    def __repr__(self):
        return f'<Meeting {self.class_session_id}#{self.sequence_number}>'
