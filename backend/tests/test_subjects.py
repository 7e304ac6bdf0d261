#!/usr/bin/env python
"""
Tests for the subjects API and its cascading delete
"""
from datetime import date
import pytest
from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from extensions import db
from models.exam_record import ExamRecord
from models.teacher_assignment import TeacherAssignment
import routes.subjects


def count(column):
    return db.session.scalar(db.select(func.count(column)))


class TestSubjectsAPI:
    """CRUD for /api/subjects"""

    def test_create_defaults_max_marks(self, client, school):
        response = client.post('/api/subjects', json={'subjectName': 'English', 'classNumber': 1})
        assert response.status_code == 200

        body = response.get_json()
        assert body['subject']['max_marks'] == 100
        assert body['subject']['class_name'] == 'Grade One'
        assert body['subject']['subject_id'] == body['subjectId']

    def test_create_in_missing_class(self, client, school):
        response = client.post('/api/subjects', json={'subject_name': 'English', 'class_number': 5})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Class does not exist'

    def test_duplicate_subject_in_class(self, client, school):
        response = client.post('/api/subjects', json={'subject_name': 'Mathematics', 'class_number': 1})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Subject already exists in this class'

    def test_same_name_in_other_class(self, client, school, create):
        body = create('subjects', subject_name='Mathematics', class_number=2, max_marks=50)
        assert body['subject']['max_marks'] == 50

    def test_invalid_subject(self, client, school):
        response = client.post('/api/subjects', json={
            'subject_name': '101', 'class_number': 1, 'max_marks': 0
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == (
            'Subject name cannot be only numbers, Maximum marks must be a positive whole number'
        )

    def test_list_includes_student_count(self, client, school, create):
        create('subjects', subject_name='Art', class_number=2)

        subjects = client.get('/api/subjects').get_json()['subjects']
        assert [(s['subject_name'], s['student_count']) for s in subjects] == [
            ('Mathematics', 1), ('Art', 0)
        ]

    def test_subjects_by_class(self, client, school, create):
        create('subjects', subject_name='English', class_number=1)
        create('subjects', subject_name='Art', class_number=2)

        subjects = client.get('/api/subjects/class/1').get_json()['subjects']
        assert [s['subject_name'] for s in subjects] == ['English', 'Mathematics']

        assert client.get('/api/subjects/class/3').get_json()['subjects'] == []

    def test_update_name_and_marks_only(self, client, school):
        response = client.put(f"/api/subjects/{school['subject_id']}", json={
            'subject_name': 'Maths', 'max_marks': 75, 'class_number': 2
        })
        assert response.status_code == 200

        subject = response.get_json()['subject']
        assert subject['subject_name'] == 'Maths'
        assert subject['max_marks'] == 75
        assert subject['class_number'] == 1

    def test_update_to_existing_name(self, client, school, create):
        english = create('subjects', subject_name='English', class_number=1)

        response = client.put(f"/api/subjects/{english['subjectId']}",
                              json={'subject_name': 'Mathematics'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Subject name already exists in this class'

    def test_get_and_update_missing_subject(self, client):
        assert client.get('/api/subjects/40').status_code == 404
        assert client.put('/api/subjects/40', json={'subject_name': 'Art'}).status_code == 404

    def test_search_by_subject_or_class_name(self, client, school, create):
        create('subjects', subject_name='Art', class_number=2)

        data = client.get('/api/subjects/search/math').get_json()
        assert data['count'] == 1

        data = client.get('/api/subjects/search/Grade%20Two').get_json()
        assert [s['subject_name'] for s in data['subjects']] == ['Art']

    def test_stats_summary(self, client, school, create):
        create('subjects', subject_name='Art', class_number=2, max_marks=50)

        stats = client.get('/api/subjects/stats/summary').get_json()['stats']
        assert stats['total'] == 2
        assert [(c['class_number'], c['subject_count']) for c in stats['classes']] == [(1, 1), (2, 1)]
        assert stats['marks'] == {'average_marks': 75.0, 'min_marks': 50, 'max_marks': 100}


class TestSubjectCascadeDelete:
    """Subject delete removes assignments and exam records atomically"""

    @pytest.fixture
    def exam_record(self, app, school):
        db.session.add(ExamRecord(student_id=school['student_id'], subject_id=school['subject_id'],
                                  marks_obtained=81, exam_date=date(2024, 3, 10)))
        db.session.commit()

    def test_delete_cascades(self, client, school, exam_record):
        response = client.delete(f"/api/subjects/{school['subject_id']}")
        assert response.status_code == 200
        assert response.get_json()['message'] == 'Subject deleted successfully'

        assert client.get(f"/api/subjects/{school['subject_id']}").status_code == 404
        assert client.get('/api/teacher-assignments').get_json()['assignments'] == []
        assert count(TeacherAssignment.assignment_id) == 0
        assert count(ExamRecord.record_id) == 0

    def test_failed_step_rolls_everything_back(self, client, school, exam_record, monkeypatch):
        def broken_delete(subject_id):
            raise OperationalError('DELETE FROM exam_records', {}, Exception('disk I/O error'))

        monkeypatch.setattr(routes.subjects, 'delete_exam_records_for', broken_delete)

        response = client.delete(f"/api/subjects/{school['subject_id']}")
        assert response.status_code == 500
        assert response.get_json() == {'success': False, 'error': 'Failed to delete subject'}

        subject = client.get(f"/api/subjects/{school['subject_id']}").get_json()['subject']
        assert subject['subject_name'] == 'Mathematics'
        assert len(client.get('/api/teacher-assignments').get_json()['assignments']) == 1
        assert count(ExamRecord.record_id) == 1

    def test_delete_missing_subject(self, client):
        response = client.delete('/api/subjects/99')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Subject not found'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
