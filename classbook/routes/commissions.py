from flask import Blueprint, jsonify, request
import logging

from classbook.services.commission_report_service import CommissionReport
from classbook.services.validation_service import ValidationService
from classbook.utils.helper import to_json

logger = logging.getLogger(__name__)

bp = Blueprint('commissions', __name__)

@bp.route('')
def teacher_commissions():
    """Commission report for one teacher, or a summary of every teacher"""
    v = ValidationService
    month, year = v.validate_month_year(request.args.get('month'), request.args.get('year'))
    teacher_id = v.validate_id(request.args.get('teacher_id'), 'teacher_id', required=False)

    if teacher_id is not None:
        report = CommissionReport.teacher_report(teacher_id, month, year)
    else:
        report = CommissionReport.summary(month, year)

    return jsonify({
        'success': True,
        'data': to_json(report)
    })
