"""
Payment Ledger

One tuition ledger per student. Transactions are append-only and the
header balance (paid, remaining, status) is always recomputed from the full
transaction history, never incremented in place, so two concurrent
payments cannot overwrite each other's effect.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from flask import current_app

from classbook import db
from classbook.models.attendance import AttendanceRecord, PRESENT_EQUIVALENT
from classbook.models.meeting import Meeting
from classbook.models.payment import Payment, PaymentTransaction, derive_payment_status
from classbook.models.student import Student
from classbook.services.commission_calculator import format_currency
from classbook.services.database_service import DatabaseService
from classbook.services.error_service import (
    ConflictError,
    DuplicateEntryError,
    NotFoundError,
    ValidationError,
)
from classbook.utils.timezone_utils import get_local_time

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT)


class PaymentLedger:

    @staticmethod
    def create_payment(student_id, total_amount=None, due_date=None, notes=None) -> Payment:
        """
        Open the ledger for a student.

        total_amount defaults to the student's final price after discount.
        A student can only ever have one ledger.
        """
        student = db.session.get(Student, student_id)
        if student is None:
            raise NotFoundError('Student', student_id)

        if total_amount is None:
            total_amount = student.final_price
        total_amount = _money(total_amount)
        if total_amount <= 0:
            raise ValidationError("total_amount must be greater than zero", 'total_amount')

        if Payment.query.filter_by(student_id=student_id).first() is not None:
            raise DuplicateEntryError(f"Student {student_id} already has a payment record")

        payment = Payment(
            student_id=student_id,
            total_amount=total_amount,
            due_date=due_date,
            notes=notes
        )
        db.session.add(payment)
        try:
            DatabaseService.commit()
        except ConflictError as e:
            # unique(student_id) lost to a concurrent create
            if Payment.query.filter_by(student_id=student_id).first() is not None:
                raise DuplicateEntryError(f"Student {student_id} already has a payment record") from e
            raise

        logger.info(f"Payment record {payment.id} created for student {student_id}: {total_amount}")
        return payment

    @staticmethod
    def get_payment(payment_id) -> Payment:
        payment = db.session.get(Payment, payment_id)
        if payment is None:
            raise NotFoundError('Payment', payment_id)
        return payment

    @staticmethod
    def record_transaction(payment_id, amount, payment_method, recorded_by,
                           payment_date: Optional[datetime] = None, notes: Optional[str] = None) -> Dict:
        """
        Append one transaction and re-project the header from the summed history.

        Returns:
            {'transaction': PaymentTransaction, 'payment': Payment,
             'paid_amount', 'remaining_amount', 'status'}
        """
        amount = _money(amount)
        if amount <= 0:
            raise ValidationError("amount must be greater than zero", 'amount')

        def _record():
            payment = (db.session.query(Payment)
                       .filter(Payment.id == payment_id)
                       .with_for_update()
                       .first())
            if payment is None:
                raise NotFoundError('Payment', payment_id)

            # Every read happens before the first write reaches the session
            history_total = (db.session.query(db.func.sum(PaymentTransaction.amount))
                             .filter(PaymentTransaction.payment_id == payment.id)
                             .scalar())
            paid_total = _money(history_total) + amount

            previous_status = payment.status
            payment.apply_paid_total(paid_total)
            transaction = PaymentTransaction(
                payment_id=payment.id,
                amount=amount,
                payment_method=payment_method,
                payment_date=payment_date or get_local_time(),
                notes=notes,
                recorded_by=recorded_by
            )
            db.session.add(transaction)
            DatabaseService.commit()

            if payment.status != previous_status:
                logger.info(f"Payment {payment.id} moved {previous_status} -> {payment.status}")
            logger.info(f"Recorded {amount} ({payment_method}) on payment {payment.id}, "
                        f"remaining {payment.remaining_amount}")
            if payment.remaining_amount < 0:
                logger.warning(f"Payment {payment.id} is overpaid by {-payment.remaining_amount}")

            result = {'transaction': transaction, 'payment': payment}
            result.update(payment.balance_dict())
            return result

        return DatabaseService.run_with_retry(_record, f"record transaction on payment {payment_id}")

    @staticmethod
    def receipt_number(transaction: PaymentTransaction) -> str:
        prefix = current_app.config.get('RECEIPT_PREFIX', 'RCP')
        stamp = (transaction.payment_date or get_local_time()).strftime('%Y%m%d')
        return f"{prefix}-{stamp}-{transaction.id:06d}"

    @staticmethod
    def receipt(transaction_id) -> Dict:
        """Printable projection of one transaction and the balance right after it"""
        transaction = db.session.get(PaymentTransaction, transaction_id)
        if transaction is None:
            raise NotFoundError('Transaction', transaction_id)
        payment = transaction.payment
        student = payment.student
        symbol = current_app.config.get('CURRENCY_SYMBOL', 'Rp')

        # Balance as it stood right after this transaction
        paid_amount = Decimal('0')
        for entry in payment.transactions:
            paid_amount += _money(entry.amount)
            if entry.id == transaction.id:
                break
        total = _money(payment.total_amount)

        return {
            'receipt_number': PaymentLedger.receipt_number(transaction),
            'company_name': current_app.config.get('COMPANY_NAME'),
            'transaction_id': transaction.id,
            'payment_id': payment.id,
            'student_id': student.id,
            'student_name': student.name,
            'course_name': student.course.name if student.course else None,
            'course_type': student.course_type,
            'amount': _money(transaction.amount),
            'amount_display': format_currency(transaction.amount, symbol),
            'payment_method': transaction.payment_method,
            'transaction_date': transaction.payment_date.isoformat() if transaction.payment_date else None,
            'recorded_by': transaction.recorded_by,
            'notes': transaction.notes,
            'total_amount': total,
            'paid_amount': paid_amount,
            'remaining_amount': total - paid_amount,
            'status': derive_payment_status(paid_amount, total)
        }

    @staticmethod
    def reminder_status(payment_id) -> Dict:
        """
        Whether the student should be reminded to pay.

        Never for a settled ledger. Otherwise due after the first attended
        meeting with nothing paid, or after PAYMENT_REMINDER_INTERVAL attended
        meetings since the latest transaction.
        """
        payment = PaymentLedger.get_payment(payment_id)
        interval = current_app.config.get('PAYMENT_REMINDER_INTERVAL', 3)

        result = {
            'payment_id': payment.id,
            'student_id': payment.student_id,
            'status': payment.status,
            'remaining_amount': _money(payment.remaining_amount),
            'reminder_due': False,
            'attended_since_last_payment': 0,
            'last_payment_date': None
        }
        if payment.status == 'completed' or _money(payment.remaining_amount) <= 0:
            return result

        attended = (AttendanceRecord.query
                    .join(Meeting, AttendanceRecord.meeting_id == Meeting.id)
                    .filter(AttendanceRecord.student_id == payment.student_id,
                            AttendanceRecord.status.in_(sorted(PRESENT_EQUIVALENT))))

        last_date = (db.session.query(db.func.max(PaymentTransaction.payment_date))
                     .filter(PaymentTransaction.payment_id == payment.id)
                     .scalar())
        if last_date is None:
            count = attended.count()
            result['reminder_due'] = count >= 1
        else:
            count = attended.filter(Meeting.date > last_date).count()
            result['reminder_due'] = count >= interval
            result['last_payment_date'] = last_date.isoformat()
        result['attended_since_last_payment'] = count
        return result
