# classbook/models/__init__.py

from classbook.models.teacher import Teacher
from classbook.models.room import Room
from classbook.models.course import Course
from classbook.models.student import Student
from classbook.models.class_model import ClassSession, Enrollment
from classbook.models.meeting import Meeting
from classbook.models.attendance import AttendanceRecord, TeacherPresenceRecord
from classbook.models.payment import Payment, PaymentTransaction

__all__ = [
    'Teacher',
    'Room',
    'Course',
    'Student',
    'ClassSession',
    'Enrollment',
    'Meeting',
    'AttendanceRecord',
    'TeacherPresenceRecord',
    'Payment',
    'PaymentTransaction'
]
