from datetime import datetime
from decimal import Decimal
from classbook import db

COURSE_TYPES = ('group', 'private')

class Course(db.Model):
    __tablename__ = 'courses'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    category = db.Column(db.String(100))

    # Pricing per course-type variant
    group_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    private_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def price_for(self, course_type):
        """Base price for a course-type variant ('group' or 'private')"""
        if course_type == 'group':
            return Decimal(self.group_price or 0)
        if course_type == 'private':
            return Decimal(self.private_price or 0)
        raise ValueError(f"Unknown course type: {course_type}")

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'group_price': float(self.group_price or 0),
            'private_price': float(self.private_price or 0),
            'is_active': self.is_active
        }

    def __repr__(self):
        return f'<Course {self.name}>'
