from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import object_session
from classbook import db

STUDENT_STATUSES = ('pending', 'confirmed', 'completed', 'graduated')

# Allowed lifecycle moves; completed/graduated are terminal
STATUS_TRANSITIONS = {
    'pending': ('confirmed',),
    'confirmed': ('completed', 'graduated'),
    'completed': ('graduated',),
    'graduated': (),
}

class Student(db.Model):
    __tablename__ = 'students'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(20))

    # Course selection and pricing
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    course_type = db.Column(db.String(20), nullable=False, default='group')  # group, private
    discount = db.Column(db.Numeric(12, 2), default=0)  # nominal discount
    final_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    # Lifecycle
    status = db.Column(db.String(20), default='pending', index=True)  # pending, confirmed, completed, graduated

    # Tracking
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    course = db.relationship('Course', backref='students', lazy=True)

    def __init__(self, **kwargs):
        super(Student, self).__init__(**kwargs)
        if kwargs.get('final_price') is None:
            self.calculate_final_price()

    def calculate_final_price(self):
        """Course price for the selected type minus the nominal discount, floored at zero"""
        if self.course is None:
            return self.final_price
        # Reading an expired course must not flush this still-transient student
        session = object_session(self.course)
        if session is None:
            base_price = self.course.price_for(self.course_type or 'group')
        else:
            with session.no_autoflush:
                base_price = self.course.price_for(self.course_type or 'group')
        discount = Decimal(self.discount or 0)
        self.final_price = max(Decimal('0'), base_price - discount)
        return self.final_price

    def can_transition_to(self, new_status):
        return new_status in STATUS_TRANSITIONS.get(self.status or 'pending', ())

    def change_status(self, new_status):
        if new_status not in STUDENT_STATUSES:
            raise ValueError(f"Unknown student status: {new_status}")
        if not self.can_transition_to(new_status):
            raise ValueError(f"Cannot move student from {self.status} to {new_status}")
        self.status = new_status

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'course_id': self.course_id,
            'course_name': self.course.name if self.course else None,
            'course_type': self.course_type,
            'discount': float(self.discount or 0),
            'final_price': float(self.final_price or 0),
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<Student {self.name}>'
