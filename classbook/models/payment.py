from datetime import datetime
from decimal import Decimal
from classbook import db
from classbook.utils.timezone_utils import get_local_time

PAYMENT_STATUSES = ('pending', 'partial', 'completed')


def derive_payment_status(paid_amount, total_amount):
    """pending when nothing is paid, completed once paid reaches total, partial in between"""
    if paid_amount <= 0:
        return 'pending'
    if paid_amount >= total_amount:
        return 'completed'
    return 'partial'


class Payment(db.Model):
    """Tuition ledger header for one student. Balance fields are a projection of the transactions."""
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, unique=True)

    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    remaining_amount = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)  # pending, partial, completed

    due_date = db.Column(db.Date)
    notes = db.Column(db.Text)
    completed_at = db.Column(db.DateTime)

    # Optimistic lock counter, bumped on every flush of this row
    version_id = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    student = db.relationship('Student', backref=db.backref('payment', uselist=False), lazy=True)
    transactions = db.relationship('PaymentTransaction', backref='payment', lazy=True,
                                   order_by='[PaymentTransaction.payment_date, PaymentTransaction.id]')

    __mapper_args__ = {'version_id_col': version_id}

    def __init__(self, **kwargs):
        super(Payment, self).__init__(**kwargs)
        if self.paid_amount is None:
            self.paid_amount = Decimal('0')
        if self.remaining_amount is None and self.total_amount is not None:
            self.remaining_amount = Decimal(self.total_amount) - Decimal(self.paid_amount)
        if self.status is None:
            self.status = 'pending'

    def apply_paid_total(self, paid_amount, now=None):
        """Project header fields from the summed transaction history"""
        total = Decimal(self.total_amount)
        self.paid_amount = paid_amount
        self.remaining_amount = total - paid_amount
        new_status = derive_payment_status(paid_amount, total)
        if new_status == 'completed':
            if self.status != 'completed' or self.completed_at is None:
                self.completed_at = now or datetime.utcnow()
        else:
            self.completed_at = None
        self.status = new_status
        return new_status

    def balance_dict(self):
        return {
            'paid_amount': Decimal(self.paid_amount),
            'remaining_amount': Decimal(self.remaining_amount),
            'status': self.status
        }

    def to_dict(self, include_transactions=False):
        data = {
            'id': self.id,
            'student_id': self.student_id,
            'student_name': self.student.name if self.student else None,
            'total_amount': float(self.total_amount),
            'paid_amount': float(self.paid_amount),
            'remaining_amount': float(self.remaining_amount),
            'status': self.status,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'notes': self.notes,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
        if include_transactions:
            data['transactions'] = [transaction.to_dict() for transaction in self.transactions]
        return data

    def __repr__(self):
        return f'<Payment student={self.student_id} {self.status}>'


class PaymentTransaction(db.Model):
    """One append-only entry in a payment ledger"""
    __tablename__ = 'payment_transactions'

    id = db.Column(db.Integer, primary_key=True)
    payment_id = db.Column(db.Integer, db.ForeignKey('payments.id'), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(50), nullable=False)  # cash, transfer, ...
    payment_date = db.Column(db.DateTime, nullable=False, default=get_local_time)  # local time, like Meeting.date
    notes = db.Column(db.Text)
    recorded_by = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'payment_id': self.payment_id,
            'amount': float(self.amount),
            'payment_method': self.payment_method,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
            'notes': self.notes,
            'recorded_by': self.recorded_by
        }

    def __repr__(self):
        return f'<PaymentTransaction {self.id} payment={self.payment_id} {self.amount}>'
