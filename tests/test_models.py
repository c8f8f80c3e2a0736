"""Tests for model-level rules: student pricing, lifecycle and payment projection."""

import warnings
from decimal import Decimal

import pytest
from sqlalchemy.exc import SAWarning

from classbook.models import Course, Payment, Student
from classbook.models.payment import derive_payment_status


def _course() -> Course:
    return Course(name='Mathematics', group_price=Decimal('850000'), private_price=Decimal('1500000'))


class TestStudentPricing:
    def test_group_price_minus_discount(self) -> None:
        student = Student(name='Eko', course=_course(), course_type='group', discount=Decimal('50000'))
        assert student.final_price == Decimal('800000')

    def test_private_price(self) -> None:
        student = Student(name='Eko', course=_course(), course_type='private')
        assert student.final_price == Decimal('1500000')

    def test_discount_never_goes_below_zero(self) -> None:
        student = Student(name='Eko', course=_course(), course_type='group', discount=Decimal('2000000'))
        assert student.final_price == Decimal('0')

    def test_explicit_final_price_is_kept(self) -> None:
        student = Student(name='Eko', course=_course(), final_price=Decimal('123'))
        assert student.final_price == Decimal('123')

    def test_unknown_course_type(self) -> None:
        with pytest.raises(ValueError):
            _course().price_for('online')

    def test_pricing_from_a_stored_course_does_not_flush(self, db, factory) -> None:
        course = factory.course()  # committed, so its attributes are expired
        with warnings.catch_warnings():
            warnings.simplefilter('error', SAWarning)
            student = Student(name='Eko', course=course, course_type='private')
        assert student.final_price == Decimal('1800000')


class TestStudentLifecycle:
    def test_forward_moves(self) -> None:
        student = Student(name='Eko', course=_course(), status='pending')
        student.change_status('confirmed')
        student.change_status('completed')
        student.change_status('graduated')
        assert student.status == 'graduated'

    def test_cannot_skip_confirmation(self) -> None:
        student = Student(name='Eko', course=_course(), status='pending')
        with pytest.raises(ValueError):
            student.change_status('graduated')

    def test_unknown_status(self) -> None:
        student = Student(name='Eko', course=_course(), status='pending')
        with pytest.raises(ValueError):
            student.change_status('expelled')


class TestPaymentProjection:
    @pytest.mark.parametrize('paid, expected', [
        (Decimal('0'), 'pending'),
        (Decimal('1'), 'partial'),
        (Decimal('999999'), 'partial'),
        (Decimal('1000000'), 'completed'),
        (Decimal('1500000'), 'completed'),
    ])
    def test_derive_status(self, paid, expected) -> None:
        assert derive_payment_status(paid, Decimal('1000000')) == expected

    def test_new_payment_is_pending_with_full_balance(self) -> None:
        payment = Payment(student_id=1, total_amount=Decimal('1000000'))
        assert payment.status == 'pending'
        assert payment.paid_amount == Decimal('0')
        assert payment.remaining_amount == Decimal('1000000')

    def test_completed_at_follows_status(self) -> None:
        payment = Payment(student_id=1, total_amount=Decimal('1000000'))
        payment.apply_paid_total(Decimal('1000000'))
        assert payment.completed_at is not None

        payment.apply_paid_total(Decimal('400000'))
        assert payment.status == 'partial'
        assert payment.completed_at is None
        assert payment.paid_amount + payment.remaining_amount == payment.total_amount
