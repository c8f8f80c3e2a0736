from flask import Blueprint, jsonify, request
import logging

from classbook import db
from classbook.models.class_model import ClassSession
from classbook.services.attendance_service import AttendanceLedger
from classbook.services.error_service import NotFoundError
from classbook.services.meeting_service import MeetingRecorder
from classbook.services.progression_service import SessionProgressionTracker
from classbook.services.validation_service import ValidationService

logger = logging.getLogger(__name__)

bp = Blueprint('classes', __name__)

@bp.route('/<int:class_id>/meetings')
def list_meetings(class_id):
    """Closed meetings of a class in sequence order"""
    meetings = MeetingRecorder.list_meetings(class_id)
    return jsonify({
        'success': True,
        'data': [meeting.to_dict() for meeting in meetings]
    })

@bp.route('/<int:class_id>/attendance')
def class_attendance(class_id):
    """Attendance history, newest meeting first, with per-status stats"""
    meetings = AttendanceLedger.session_history(class_id)
    return jsonify({
        'success': True,
        'data': {
            'history': [meeting.to_dict(include_attendance=True) for meeting in meetings],
            'stats': AttendanceLedger.session_stats(class_id)
        }
    })

@bp.route('/<int:class_id>/progress')
def class_progress(class_id):
    class_session = db.session.get(ClassSession, class_id)
    if class_session is None:
        raise NotFoundError('Class', class_id)
    return jsonify({
        'success': True,
        'data': SessionProgressionTracker.progress(class_session)
    })

@bp.route('/<int:class_id>/complete', methods=['PUT'])
def complete_class(class_id):
    """Mark a class as finished; sets its end date and deactivates it"""
    data = request.get_json(silent=True) or {}
    end_date = ValidationService.validate_date(data.get('end_date'), 'end_date')

    class_session = SessionProgressionTracker.finish(class_id, end_date)
    return jsonify({
        'success': True,
        'message': f'Class {class_session.name} completed',
        'data': SessionProgressionTracker.progress(class_session)
    })

@bp.route('/<int:class_id>/enrollments', methods=['POST'])
def enroll_student(class_id):
    data = ValidationService.require_payload(request.get_json(silent=True))
    student_id = ValidationService.validate_id(data.get('student_id'), 'student_id')

    enrollment = MeetingRecorder.enroll(class_id, student_id)
    return jsonify({
        'success': True,
        'data': enrollment.to_dict()
    }), 201
