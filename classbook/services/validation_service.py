"""
Validation Service for request payload parsing
Turns loosely-typed JSON into the typed inputs the core services expect,
raising ValidationError before anything is written.
"""
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from classbook.models.attendance import ATTENDANCE_STATUSES
from classbook.services.error_service import ValidationError
from classbook.services.meeting_service import (
    AttendanceEntry,
    CloseMeetingRequest,
    TaughtByAssigned,
    TaughtBySubstitute,
)

# Legacy status spellings still sent by older attendance screens
STATUS_ALIASES = {
    'HADIR': 'present',
    'TIDAK_HADIR': 'absent',
    'TERLAMBAT': 'late',
    'IZIN': 'excused',
}

PAYMENT_METHODS = ('cash', 'transfer', 'card', 'ewallet', 'other')

# datetime tops out at 9999-12-31, and a report needs the following month too
MAX_REPORT_YEAR = 9998


class ValidationService:
    """Centralized validation service"""

    @staticmethod
    def require_payload(data) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    @staticmethod
    def validate_id(value, field: str, required: bool = True) -> Optional[int]:
        """
        Validate a positive integer identifier

        Args:
            value: Raw value from the payload
            field: Field name for the error message
            required: Whether a missing value is an error

        Returns:
            The identifier as int, or None when optional and missing
        """
        if value is None or value == '':
            if required:
                raise ValidationError(f"{field} is required", field)
            return None
        if isinstance(value, bool):
            raise ValidationError(f"{field} must be a positive integer", field)
        try:
            identifier = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be a positive integer", field)
        if identifier <= 0 or str(identifier) != str(value).strip():
            raise ValidationError(f"{field} must be a positive integer", field)
        return identifier

    @staticmethod
    def validate_amount(value, field: str = 'amount', positive: bool = True) -> Decimal:
        if value is None or value == '' or isinstance(value, bool):
            raise ValidationError(f"{field} is required", field)
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field} must be a number", field)
        if not amount.is_finite():
            raise ValidationError(f"{field} must be a number", field)
        if positive and amount <= 0:
            raise ValidationError(f"{field} must be greater than zero", field)
        if not positive and amount < 0:
            raise ValidationError(f"{field} must not be negative", field)
        return amount

    @staticmethod
    def validate_datetime(value, field: str, required: bool = False) -> Optional[datetime]:
        """Accept ISO dates or datetimes; dates become midnight"""
        if value is None or value == '':
            if required:
                raise ValidationError(f"{field} is required", field)
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, datetime.min.time())
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            raise ValidationError(f"{field} must be an ISO date or datetime", field)

    @staticmethod
    def validate_date(value, field: str, required: bool = False) -> Optional[date]:
        parsed = ValidationService.validate_datetime(value, field, required)
        return parsed.date() if parsed else None

    @staticmethod
    def validate_month_year(month, year):
        """Both or neither; month 1-12, year low enough that the month after still exists"""
        if month is None and year is None:
            return None, None
        if month is None or year is None:
            raise ValidationError("month and year must be given together", 'month' if month is None else 'year')
        month = ValidationService.validate_id(month, 'month')
        year = ValidationService.validate_id(year, 'year')
        if month > 12:
            raise ValidationError("month must be between 1 and 12", 'month')
        if year > MAX_REPORT_YEAR:
            raise ValidationError(f"year must be between 1 and {MAX_REPORT_YEAR}", 'year')
        return month, year

    @staticmethod
    def validate_attendance_status(value, field: str = 'status') -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field} is required", field)
        status = STATUS_ALIASES.get(value.strip().upper(), value.strip().lower())
        if status not in ATTENDANCE_STATUSES:
            raise ValidationError(
                f"{field} must be one of: {', '.join(ATTENDANCE_STATUSES)}", field)
        return status

    @staticmethod
    def validate_text(value, field: str, required: bool = False, max_length: int = None) -> Optional[str]:
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                raise ValidationError(f"{field} is required", field)
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be text", field)
        value = value.strip()
        if max_length and len(value) > max_length:
            raise ValidationError(f"{field} must be at most {max_length} characters", field)
        return value

    @staticmethod
    def validate_payment_method(value) -> str:
        method = ValidationService.validate_text(value, 'method', required=True, max_length=50)
        method = method.lower()
        if method not in PAYMENT_METHODS:
            raise ValidationError(
                f"method must be one of: {', '.join(PAYMENT_METHODS)}", 'method')
        return method

    @staticmethod
    def parse_close_meeting(data) -> CloseMeetingRequest:
        """Build a CloseMeetingRequest from the attendance screen payload"""
        data = ValidationService.require_payload(data)
        v = ValidationService

        session_id = v.validate_id(data.get('session_id'), 'session_id')
        assigned_id = v.validate_id(data.get('assigned_instructor_id'), 'assigned_instructor_id')
        assigned_present = data.get('assigned_instructor_present', True)
        if not isinstance(assigned_present, bool):
            raise ValidationError("assigned_instructor_present must be true or false",
                                  'assigned_instructor_present')

        raw_records = data.get('attendance_records')
        if not isinstance(raw_records, list) or not raw_records:
            raise ValidationError("attendance_records must be a non-empty list", 'attendance_records')

        entries: List[AttendanceEntry] = []
        seen = set()
        for index, raw in enumerate(raw_records):
            if not isinstance(raw, dict):
                raise ValidationError(f"attendance_records[{index}] must be an object", 'attendance_records')
            student_id = v.validate_id(raw.get('student_id'), f'attendance_records[{index}].student_id')
            if student_id in seen:
                raise ValidationError(f"Student {student_id} appears more than once", 'attendance_records')
            seen.add(student_id)
            entries.append(AttendanceEntry(
                student_id=student_id,
                status=v.validate_attendance_status(raw.get('status'), f'attendance_records[{index}].status'),
                notes=v.validate_text(raw.get('notes'), f'attendance_records[{index}].notes')
            ))

        substitution = data.get('substitution')
        if substitution is None or substitution is False:
            taught_by = TaughtByAssigned()
        else:
            if not isinstance(substitution, dict):
                raise ValidationError("substitution must be an object", 'substitution')
            substitute_id = substitution.get('substitute_instructor_id')
            if substitute_id in (None, ''):
                raise ValidationError("A substitute instructor must be selected when the assigned instructor is absent",
                                      'substitution.substitute_instructor_id')
            main_id = v.validate_id(substitution.get('main_instructor_id'), 'substitution.main_instructor_id',
                                    required=False)
            if main_id is not None and main_id != assigned_id:
                raise ValidationError("substitution.main_instructor_id must match assigned_instructor_id",
                                      'substitution.main_instructor_id')
            taught_by = TaughtBySubstitute(
                substitute_id=v.validate_id(substitute_id, 'substitution.substitute_instructor_id'),
                notes=v.validate_text(substitution.get('notes'), 'substitution.notes')
            )

        return CloseMeetingRequest(
            session_id=session_id,
            assigned_instructor_id=assigned_id,
            assigned_instructor_present=assigned_present,
            attendance=entries,
            taught_by=taught_by,
            topic=v.validate_text(data.get('topic'), 'topic', max_length=200)
        )
