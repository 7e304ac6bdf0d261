"""
Shared fixtures: an app on in-memory SQLite and its test client
"""
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from app import create_app
from extensions import db


@pytest.fixture(scope='function')
def app():
    """Create test app"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create(client):
    """POST a resource and return the response body; the call must succeed"""
    def _create(resource, **payload):
        response = client.post(f'/api/{resource}', json=payload)
        body = response.get_json()
        assert response.status_code == 200, body
        assert body['success'] is True
        return body
    return _create


@pytest.fixture
def school(create):
    """Two classes, a student, a teacher and a subject with an assignment"""
    create('classes', class_name='Grade One', class_number=1)
    create('classes', class_name='Grade Two', class_number=2)

    student = create('students', roll_number='A101', name='Mary Jane', fname='Peter Jane',
                     age=7, class_number=1, gender='Female')
    teacher = create('teachers', name='John Doe', email='john@school.edu',
                     gender='Male', age=40, hire_date='2015-08-01')
    subject = create('subjects', subject_name='Mathematics', class_number=1)
    assignment = create('teacher-assignments', teacher_id=teacher['teacherId'],
                        class_number=1, subject_id=subject['subjectId'])

    return {
        'student_id': student['studentId'],
        'teacher_id': teacher['teacherId'],
        'subject_id': subject['subjectId'],
        'assignment_id': assignment['assignmentId'],
    }
