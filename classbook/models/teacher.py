from datetime import datetime
from classbook import db

class Teacher(db.Model):
    __tablename__ = "teachers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(20))
    education = db.Column(db.String(200))
    specialization = db.Column(db.String(200))

    # Status
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Tracking
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __init__(self, **kwargs):
        super(Teacher, self).__init__(**kwargs)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'education': self.education,
            'specialization': self.specialization,
            'is_active': self.is_active
        }

    def __repr__(self):
        return f"<Teacher {self.name}>"
