from classbook import db

class Room(db.Model):
    __tablename__ = 'rooms'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    capacity = db.Column(db.Integer, default=10)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'capacity': self.capacity}

    def __repr__(self):
        return f'<Room {self.name}>'
