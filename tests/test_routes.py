"""HTTP surface tests through the Flask test client."""

from datetime import datetime

import pytest


@pytest.fixture
def classroom(factory):
    teacher = factory.teacher()
    students = [factory.student(name=name) for name in ('Andi', 'Citra', 'Dewi', 'Eko')]
    class_session = factory.class_session(teacher=teacher, commission_type='BY_STUDENT',
                                          commission_amount='10000', students=students)
    return class_session, teacher, students


def _attendance_payload(class_session, teacher, students, statuses, **extra):
    payload = {
        'session_id': class_session.id,
        'assigned_instructor_id': teacher.id,
        'attendance_records': [
            {'student_id': student.id, 'status': status} for student, status in zip(students, statuses)
        ]
    }
    payload.update(extra)
    return payload


class TestCloseMeeting:
    def test_records_meeting(self, client, classroom) -> None:
        class_session, teacher, students = classroom
        response = client.post('/api/v1/attendance', json=_attendance_payload(
            class_session, teacher, students, ['present', 'present', 'late', 'absent']))

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['sequence_number'] == 1
        assert data['present_count'] == 3
        assert data['commission']['amount'] == 30000.0
        assert data['commission']['policy'] == 'BY_STUDENT'

    def test_legacy_status_names(self, client, classroom) -> None:
        class_session, teacher, students = classroom
        response = client.post('/api/v1/attendance', json=_attendance_payload(
            class_session, teacher, students, ['HADIR', 'TERLAMBAT', 'IZIN', 'TIDAK_HADIR']))

        assert response.status_code == 201
        assert response.get_json()['data']['present_count'] == 3

    def test_nobody_present(self, client, classroom) -> None:
        class_session, teacher, students = classroom
        response = client.post('/api/v1/attendance', json=_attendance_payload(
            class_session, teacher, students, ['absent'] * 4))

        assert response.status_code == 400
        body = response.get_json()
        assert body['success'] is False
        assert body['error']['code'] == 'VALIDATION_ERROR'

    def test_substitution_requires_substitute(self, client, classroom) -> None:
        class_session, teacher, students = classroom
        response = client.post('/api/v1/attendance', json=_attendance_payload(
            class_session, teacher, students, ['present'],
            substitution={'main_instructor_id': teacher.id}))

        assert response.status_code == 400
        assert response.get_json()['error']['details']['field'] == 'substitution.substitute_instructor_id'

    def test_unknown_status(self, client, classroom) -> None:
        class_session, teacher, students = classroom
        response = client.post('/api/v1/attendance', json=_attendance_payload(
            class_session, teacher, students, ['sleeping']))
        assert response.status_code == 400

    def test_missing_body(self, client) -> None:
        response = client.post('/api/v1/attendance', data='not json', content_type='text/plain')
        assert response.status_code == 400

    def test_unknown_class(self, client, classroom) -> None:
        _, teacher, students = classroom
        response = client.post('/api/v1/attendance', json={
            'session_id': 999,
            'assigned_instructor_id': teacher.id,
            'attendance_records': [{'student_id': students[0].id, 'status': 'present'}]
        })
        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'NOT_FOUND'


class TestClassEndpoints:
    def test_meetings_progress_and_complete(self, client, classroom) -> None:
        class_session, teacher, students = classroom
        for _ in range(2):
            client.post('/api/v1/attendance', json=_attendance_payload(
                class_session, teacher, students, ['present']))

        meetings = client.get(f'/api/v1/classes/{class_session.id}/meetings').get_json()['data']
        assert [meeting['sequence_number'] for meeting in meetings] == [1, 2]

        progress = client.get(f'/api/v1/classes/{class_session.id}/progress').get_json()['data']
        assert progress['completed_meetings'] == 2
        assert progress['remaining_meetings'] == 6
        assert progress['started'] is True

        response = client.put(f'/api/v1/classes/{class_session.id}/complete', json={'end_date': '2026-05-30'})
        assert response.status_code == 200
        assert response.get_json()['data']['end_date'] == '2026-05-30'
        assert response.get_json()['data']['is_active'] is False

        again = client.put(f'/api/v1/classes/{class_session.id}/complete')
        assert again.status_code == 400

    def test_class_attendance(self, client, classroom) -> None:
        class_session, teacher, students = classroom
        client.post('/api/v1/attendance', json=_attendance_payload(
            class_session, teacher, students, ['present', 'absent']))

        data = client.get(f'/api/v1/classes/{class_session.id}/attendance').get_json()['data']
        assert len(data['history']) == 1
        assert len(data['history'][0]['attendance']) == 2
        assert data['stats']['status_counts']['absent'] == 1

    def test_enroll_is_idempotent(self, client, factory, classroom) -> None:
        class_session, _, _ = classroom
        newcomer = factory.student(name='Fajar')

        first = client.post(f'/api/v1/classes/{class_session.id}/enrollments', json={'student_id': newcomer.id})
        second = client.post(f'/api/v1/classes/{class_session.id}/enrollments', json={'student_id': newcomer.id})

        assert first.status_code == 201
        assert first.get_json()['data']['id'] == second.get_json()['data']['id']

    def test_unknown_class_progress(self, client, db) -> None:
        assert client.get('/api/v1/classes/77/progress').status_code == 404


class TestPayments:
    def test_payment_flow(self, client, factory) -> None:
        student = factory.student()
        created = client.post('/api/v1/payments', json={'student_id': student.id, 'total_amount': 1000000})
        assert created.status_code == 201
        payment_id = created.get_json()['data']['id']

        first = client.post('/api/v1/payments/transactions', json={
            'payment_id': payment_id, 'amount': 400000, 'method': 'cash',
            'recorded_by': 'Front desk', 'date': '2026-02-14T10:30:00'
        })
        assert first.status_code == 201
        assert first.get_json()['data']['status'] == 'partial'
        assert first.get_json()['data']['remaining_amount'] == 600000.0

        second = client.post('/api/v1/payments/transactions', json={
            'payment_id': payment_id, 'amount': '600000', 'method': 'transfer',
            'recorded_by': 'Front desk'
        })
        assert second.get_json()['data']['status'] == 'completed'

        payment = client.get(f'/api/v1/payments/{payment_id}').get_json()['data']
        assert payment['paid_amount'] == 1000000.0
        assert len(payment['transactions']) == 2

        transaction_id = first.get_json()['data']['transaction']['id']
        receipt = client.get(f'/api/v1/payments/transactions/{transaction_id}/receipt').get_json()['data']
        assert receipt['receipt_number'] == f'RCP-20260214-{transaction_id:06d}'
        assert receipt['remaining_amount'] == 600000.0

        reminder = client.get(f'/api/v1/payments/{payment_id}/reminder').get_json()['data']
        assert reminder['reminder_due'] is False

    def test_duplicate_payment(self, client, factory) -> None:
        student = factory.student()
        client.post('/api/v1/payments', json={'student_id': student.id})
        response = client.post('/api/v1/payments', json={'student_id': student.id})
        assert response.status_code == 409
        assert response.get_json()['error']['code'] == 'DUPLICATE_ENTRY'

    def test_transaction_validation(self, client, factory) -> None:
        payment = factory.payment()
        response = client.post('/api/v1/payments/transactions', json={
            'payment_id': payment.id, 'amount': -5, 'method': 'cash', 'recorded_by': 'Front desk'
        })
        assert response.status_code == 400

        response = client.post('/api/v1/payments/transactions', json={
            'payment_id': payment.id, 'amount': 5, 'method': 'barter', 'recorded_by': 'Front desk'
        })
        assert response.status_code == 400


class TestReports:
    def test_commission_report_and_summary(self, client, db, classroom) -> None:
        class_session, teacher, students = classroom
        client.post('/api/v1/attendance', json=_attendance_payload(
            class_session, teacher, students, ['present', 'present']))

        report = client.get(f'/api/v1/teacher-commissions?teacher_id={teacher.id}').get_json()['data']
        assert report['total_commission'] == 20000.0
        assert report['total_meetings'] == 1

        summary = client.get('/api/v1/teacher-commissions').get_json()['data']
        assert summary['grand_total'] == 20000.0

        now = datetime.now()
        empty = client.get(f'/api/v1/teacher-commissions?teacher_id={teacher.id}&month=1&year={now.year - 5}')
        assert empty.get_json()['data']['total_meetings'] == 0

    def test_month_without_year(self, client, db) -> None:
        response = client.get('/api/v1/teacher-commissions?month=3')
        assert response.status_code == 400

    def test_year_past_the_calendar(self, client, db) -> None:
        response = client.get('/api/v1/teacher-commissions?month=12&year=9999')
        assert response.status_code == 400
        error = response.get_json()['error']
        assert error['code'] == 'VALIDATION_ERROR'
        assert error['details']['field'] == 'year'

        response = client.get('/api/v1/teacher-commissions?month=12&year=9998')
        assert response.status_code == 200

    def test_teacher_and_student_attendance(self, client, classroom) -> None:
        class_session, teacher, students = classroom
        client.post('/api/v1/attendance', json=_attendance_payload(
            class_session, teacher, students, ['present', 'late']))

        teacher_data = client.get(f'/api/v1/teachers/{teacher.id}/attendance').get_json()['data']
        assert teacher_data['stats']['present'] == 1
        assert teacher_data['history'][0]['presence'][0]['status'] == 'present'

        student_data = client.get(f'/api/v1/students/{students[1].id}/attendance').get_json()['data']
        assert student_data['history'][0]['status'] == 'late'
        assert student_data['history'][0]['sequence_number'] == 1


def test_health(client, db) -> None:
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['checks']['database'] == 'healthy'
