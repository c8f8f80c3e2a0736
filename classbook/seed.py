"""
Demo data for local development

Builds a small tutoring centre: two courses, three teachers, one class per
commission policy, enrolled students and their payment ledgers.
"""
import logging
from decimal import Decimal

from sqlalchemy import MetaData

from classbook import db
from classbook.models import ClassSession, Course, Enrollment, Payment, Room, Student, Teacher

logger = logging.getLogger(__name__)


def reset_schema():
    """Drop every table (reflected, so leftovers go too) and recreate the schema"""
    meta = MetaData()
    meta.reflect(bind=db.engine)
    meta.drop_all(bind=db.engine)
    db.create_all()


def reset_and_seed():
    reset_schema()

    english = Course(name='English Conversation', category='Language',
                     group_price=Decimal('1000000'), private_price=Decimal('1800000'))
    maths = Course(name='Mathematics Grade 9', category='Academic',
                   group_price=Decimal('850000'), private_price=Decimal('1500000'))

    rina = Teacher(name='Rina Putri', phone='081200000001', specialization='English')
    budi = Teacher(name='Budi Santoso', phone='081200000002', specialization='Mathematics')
    sari = Teacher(name='Sari Wulandari', phone='081200000003', specialization='English, Mathematics')

    room_a = Room(name='Room A', capacity=8)
    room_b = Room(name='Room B', capacity=4)

    db.session.add_all([english, maths, rina, budi, sari, room_a, room_b])
    db.session.flush()

    english_class = ClassSession(name='English Conversation - Evening', course=english, teacher=rina,
                                 room=room_a, schedule='Mon & Wed 18:00-19:30', total_meetings=8,
                                 commission_type='BY_CLASS', commission_amount=Decimal('50000'))
    maths_class = ClassSession(name='Mathematics Grade 9 - Saturday', course=maths, teacher=budi,
                               room=room_b, schedule='Sat 09:00-10:30', total_meetings=8,
                               commission_type='BY_STUDENT', commission_amount=Decimal('10000'))
    db.session.add_all([english_class, maths_class])

    students = [
        Student(name='Andi Pratama', course=english, course_type='group'),
        Student(name='Citra Lestari', course=english, course_type='group', discount=Decimal('100000')),
        Student(name='Dewi Anggraini', course=english, course_type='group'),
        Student(name='Eko Saputra', course=maths, course_type='group'),
        Student(name='Fajar Nugroho', course=maths, course_type='group', discount=Decimal('50000')),
    ]
    db.session.add_all(students)
    db.session.flush()

    for student in students:
        class_session = english_class if student.course is english else maths_class
        db.session.add(Enrollment(class_session=class_session, student=student))
        db.session.add(Payment(student=student, total_amount=student.final_price))

    db.session.commit()

    summary = {
        'courses': Course.query.count(),
        'teachers': Teacher.query.count(),
        'classes': ClassSession.query.count(),
        'students': Student.query.count(),
        'payments': Payment.query.count()
    }
    logger.info(f"Seeded demo data: {summary}")
    return summary
