"""Shared fixtures: an application on a throwaway SQLite file and model factories."""

from decimal import Decimal

import pytest

from classbook import create_app, db as _db
from classbook.models import ClassSession, Course, Enrollment, Payment, Student, Teacher
from config import TestingConfig


@pytest.fixture
def app(tmp_path):
    class _Config(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'classbook-test.db'}"

    app = create_app(_Config)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Small builders for the rows most tests need."""

    def __init__(self, db):
        self.db = db
        self._course = None

    def course(self, group_price='1000000', private_price='1800000'):
        course = Course(name='English Conversation', category='Language',
                        group_price=Decimal(group_price), private_price=Decimal(private_price))
        self.db.session.add(course)
        self.db.session.commit()
        return course

    def default_course(self):
        if self._course is None:
            self._course = self.course()
        return self._course

    def teacher(self, name='Rina Putri'):
        teacher = Teacher(name=name)
        self.db.session.add(teacher)
        self.db.session.commit()
        return teacher

    def student(self, name='Andi', discount='0', course=None, course_type='group'):
        student = Student(name=name, course=course or self.default_course(),
                          course_type=course_type, discount=Decimal(discount))
        self.db.session.add(student)
        self.db.session.commit()
        return student

    def class_session(self, teacher=None, commission_type='BY_CLASS', commission_amount='50000',
                      total_meetings=8, students=()):
        class_session = ClassSession(
            name='Evening Group',
            course=self.default_course(),
            teacher=teacher,
            total_meetings=total_meetings,
            commission_type=commission_type,
            commission_amount=Decimal(commission_amount)
        )
        self.db.session.add(class_session)
        self.db.session.flush()
        for student in students:
            self.db.session.add(Enrollment(class_session_id=class_session.id, student_id=student.id))
        self.db.session.commit()
        return class_session

    def payment(self, student=None, total_amount='1000000'):
        payment = Payment(student=student or self.student(), total_amount=Decimal(total_amount))
        self.db.session.add(payment)
        self.db.session.commit()
        return payment


@pytest.fixture
def factory(db):
    return Factory(db)
