#!/usr/bin/env python
"""
Tests for the students API
"""
from datetime import date
import pytest
from sqlalchemy import func
from extensions import db
from models.exam_record import ExamRecord


def student_payload(**overrides):
    payload = {
        'roll_number': 'B201',
        'name': 'Tom Brown',
        'fname': 'James Brown',
        'age': 8,
        'class_number': 2,
        'gender': 'Male',
    }
    payload.update(overrides)
    return payload


class TestStudentsAPI:
    """CRUD and lookups for /api/students"""

    def test_create_returns_row_with_class_name(self, client, school):
        response = client.post('/api/students', json=student_payload())
        assert response.status_code == 200

        body = response.get_json()
        assert body['message'] == 'Student added successfully'
        assert body['student']['class_name'] == 'Grade Two'
        assert body['student']['student_id'] == body['studentId']

    def test_create_in_missing_class(self, client, school):
        response = client.post('/api/students', json=student_payload(class_number=9))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Class does not exist'

    def test_duplicate_roll_number(self, client, school):
        response = client.post('/api/students', json=student_payload(roll_number='A101'))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Roll number already exists'

    def test_invalid_student(self, client, school):
        response = client.post('/api/students', json=student_payload(age=26, phone='123456'))
        assert response.status_code == 400
        assert response.get_json()['error'] == (
            'Age must be between 5 and 25, Phone number must be at least 7 digits'
        )

    def test_list_ordered_by_class_then_name(self, client, school, create):
        create('students', **student_payload())
        create('students', **student_payload(roll_number='A100', name='Adam Smith', class_number=1))

        students = client.get('/api/students').get_json()['students']
        assert [s['name'] for s in students] == ['Adam Smith', 'Mary Jane', 'Tom Brown']

    def test_students_by_class(self, client, school, create):
        create('students', **student_payload())
        create('students', **student_payload(roll_number='A100', name='Zed Smith', class_number=1))

        response = client.get('/api/students/class/1')
        assert response.status_code == 200
        assert [s['roll_number'] for s in response.get_json()['students']] == ['A100', 'A101']

    def test_get_missing_student(self, client):
        response = client.get('/api/students/77')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Student not found'

    def test_update_student(self, client, school):
        response = client.put(f"/api/students/{school['student_id']}",
                              json=student_payload(roll_number='A101', name='Mary Ann'))
        assert response.status_code == 200

        student = response.get_json()['student']
        assert student['name'] == 'Mary Ann'
        assert student['class_number'] == 2
        assert student['class_name'] == 'Grade Two'

    def test_update_to_taken_roll_number(self, client, school, create):
        create('students', **student_payload())

        response = client.put(f"/api/students/{school['student_id']}",
                              json=student_payload(roll_number='B201'))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Roll number already exists'

    def test_update_missing_student(self, client, school):
        response = client.put('/api/students/500', json=student_payload())
        assert response.status_code == 404

    def test_delete_removes_exam_records(self, client, school):
        db.session.add(ExamRecord(student_id=school['student_id'], subject_id=school['subject_id'],
                                  marks_obtained=70, exam_date=date(2024, 3, 1)))
        db.session.commit()

        response = client.delete(f"/api/students/{school['student_id']}")
        assert response.status_code == 200
        assert response.get_json()['message'] == 'Student deleted successfully'

        assert client.get(f"/api/students/{school['student_id']}").status_code == 404
        assert db.session.scalar(db.select(func.count(ExamRecord.record_id))) == 0

    def test_delete_missing_student(self, client):
        assert client.delete('/api/students/3').status_code == 404


class TestStudentSearchAndStats:

    def test_search_by_name_roll_or_father(self, client, school, create):
        create('students', **student_payload())

        data = client.get('/api/students/search/jane').get_json()
        assert data['count'] == 1
        assert data['students'][0]['roll_number'] == 'A101'

        data = client.get('/api/students/search/B20').get_json()
        assert [s['name'] for s in data['students']] == ['Tom Brown']

        data = client.get('/api/students/search/James').get_json()
        assert data['count'] == 1

        assert client.get('/api/students/search/nobody').get_json()['count'] == 0

    def test_stats_summary(self, client, school, create):
        create('students', **student_payload())
        create('students', **student_payload(roll_number='B202', name='Lia Brown', age=None,
                                             gender='Female'))

        stats = client.get('/api/students/stats/summary').get_json()['stats']

        assert stats['total'] == 3
        genders = {row['gender']: row['count'] for row in stats['gender']}
        assert genders == {'Female': 2, 'Male': 1}
        assert [(c['class_number'], c['student_count']) for c in stats['classes']] == [(1, 1), (2, 2)]
        assert stats['age'] == {'average_age': 7.5, 'min_age': 7, 'max_age': 8}


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
