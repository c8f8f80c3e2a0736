from flask import Blueprint, jsonify, request
import logging

from classbook.services.payment_service import PaymentLedger
from classbook.services.validation_service import ValidationService
from classbook.utils.helper import to_json

logger = logging.getLogger(__name__)

bp = Blueprint('payments', __name__)

@bp.route('', methods=['POST'])
def create_payment():
    """Open the tuition ledger for a student"""
    v = ValidationService
    data = v.require_payload(request.get_json(silent=True))

    total_amount = data.get('total_amount')
    payment = PaymentLedger.create_payment(
        student_id=v.validate_id(data.get('student_id'), 'student_id'),
        total_amount=v.validate_amount(total_amount, 'total_amount') if total_amount is not None else None,
        due_date=v.validate_date(data.get('due_date'), 'due_date'),
        notes=v.validate_text(data.get('notes'), 'notes')
    )
    return jsonify({
        'success': True,
        'data': payment.to_dict()
    }), 201

@bp.route('/<int:payment_id>')
def get_payment(payment_id):
    payment = PaymentLedger.get_payment(payment_id)
    return jsonify({
        'success': True,
        'data': payment.to_dict(include_transactions=True)
    })

@bp.route('/<int:payment_id>/reminder')
def payment_reminder(payment_id):
    return jsonify({
        'success': True,
        'data': to_json(PaymentLedger.reminder_status(payment_id))
    })

@bp.route('/transactions', methods=['POST'])
def record_transaction():
    """Append a payment and return the recomputed balance"""
    v = ValidationService
    data = v.require_payload(request.get_json(silent=True))

    result = PaymentLedger.record_transaction(
        payment_id=v.validate_id(data.get('payment_id'), 'payment_id'),
        amount=v.validate_amount(data.get('amount'), 'amount'),
        payment_method=v.validate_payment_method(data.get('method')),
        recorded_by=v.validate_text(data.get('recorded_by'), 'recorded_by', required=True, max_length=120),
        payment_date=v.validate_datetime(data.get('date'), 'date'),
        notes=v.validate_text(data.get('notes'), 'notes')
    )
    return jsonify({
        'success': True,
        'message': 'Payment recorded successfully',
        'data': {
            'transaction': result['transaction'].to_dict(),
            'paid_amount': float(result['paid_amount']),
            'remaining_amount': float(result['remaining_amount']),
            'status': result['status']
        }
    }), 201

@bp.route('/transactions/<int:transaction_id>/receipt')
def transaction_receipt(transaction_id):
    return jsonify({
        'success': True,
        'data': to_json(PaymentLedger.receipt(transaction_id))
    })
