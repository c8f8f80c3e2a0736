from flask import Blueprint, jsonify, request
import logging

from classbook.services.attendance_service import AttendanceLedger
from classbook.services.meeting_service import MeetingRecorder
from classbook.services.validation_service import ValidationService
from classbook.utils.helper import to_json

logger = logging.getLogger(__name__)

bp = Blueprint('attendance', __name__)

@bp.route('/attendance', methods=['POST'])
def close_meeting():
    """Record attendance for the next meeting of a class"""
    close_request = ValidationService.parse_close_meeting(request.get_json(silent=True))
    result = MeetingRecorder().close_meeting(close_request)

    return jsonify({
        'success': True,
        'message': f"Meeting {result['sequence_number']} recorded",
        'data': to_json(result)
    }), 201

@bp.route('/teachers/<int:teacher_id>/attendance')
def teacher_attendance(teacher_id):
    """Teacher presence history with taught/absent/substitute counts"""
    month, year = ValidationService.validate_month_year(request.args.get('month'), request.args.get('year'))
    meetings = AttendanceLedger.teacher_history(teacher_id, month, year)

    history = []
    for meeting in meetings:
        own = [record for record in meeting.teacher_presence_records if record.teacher_id == teacher_id]
        entry = meeting.to_dict()
        entry['presence'] = [record.to_dict() for record in own]
        history.append(entry)

    return jsonify({
        'success': True,
        'data': {
            'history': history,
            'stats': AttendanceLedger.teacher_stats(teacher_id, month, year)
        }
    })

@bp.route('/students/<int:student_id>/attendance')
def student_attendance(student_id):
    """One student's attendance across all classes"""
    records = AttendanceLedger.student_history(student_id)

    history = []
    for record in records:
        entry = record.to_dict()
        entry['class_session_id'] = record.meeting.class_session_id
        entry['sequence_number'] = record.meeting.sequence_number
        entry['meeting_date'] = record.meeting.date.isoformat() if record.meeting.date else None
        history.append(entry)

    return jsonify({
        'success': True,
        'data': {
            'student_id': student_id,
            'history': history,
            'total_records': len(history)
        }
    })
