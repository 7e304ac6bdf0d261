#!/usr/bin/env python
"""
Tests for database constraint handling: driver error classification and
the 400 messages returned when a constraint fires after the pre-checks
"""
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

import routes.classes
import routes.students
import routes.subjects
import routes.teacher_assignments
import routes.teachers
from utils.responses import FOREIGN_KEY, UNIQUE, classify_integrity_error, database_error


class PgDriverError(Exception):
    """Stands in for a psycopg error, which carries the SQLSTATE as pgcode"""

    def __init__(self, message, pgcode):
        super().__init__(message)
        self.pgcode = pgcode


def integrity_error(orig):
    return IntegrityError('INSERT INTO students (roll_number) VALUES (?)', {}, orig)


class TestIntegrityClassification:
    """Mapping driver errors to FOREIGN_KEY / UNIQUE"""

    def test_postgres_sqlstate(self):
        assert classify_integrity_error(integrity_error(PgDriverError('constraint violated', '23505'))) == UNIQUE
        assert classify_integrity_error(integrity_error(PgDriverError('constraint violated', '23503'))) == FOREIGN_KEY

    @pytest.mark.parametrize('code, kind', [
        (1062, UNIQUE),
        (1451, FOREIGN_KEY),
        (1452, FOREIGN_KEY),
    ])
    def test_mysql_error_number(self, code, kind):
        error = integrity_error(Exception(code, 'constraint violated'))
        assert classify_integrity_error(error) == kind

    def test_code_wins_over_message(self):
        error = integrity_error(Exception(1452, 'Duplicate row in child table'))
        assert classify_integrity_error(error) == FOREIGN_KEY

    def test_sqlite_message_text(self):
        assert classify_integrity_error(
            integrity_error(Exception('FOREIGN KEY constraint failed'))
        ) == FOREIGN_KEY
        assert classify_integrity_error(
            integrity_error(Exception('UNIQUE constraint failed: classes.class_number'))
        ) == UNIQUE

    def test_unrelated_constraint(self):
        error = integrity_error(Exception('NOT NULL constraint failed: students.name'))
        assert classify_integrity_error(error) is None

    def test_non_integrity_error(self):
        error = OperationalError('SELECT 1', {}, Exception('UNIQUE constraint failed'))
        assert classify_integrity_error(error) is None

    def test_database_error_maps_to_400(self, app):
        error = integrity_error(PgDriverError('constraint violated', '23505'))
        response, status = database_error(error, 'Failed to add student', {UNIQUE: 'Roll number already exists'})
        assert status == 400
        assert response.get_json() == {'success': False, 'error': 'Roll number already exists'}

    def test_database_error_unmapped_is_500(self, app):
        error = integrity_error(PgDriverError('constraint violated', '23503'))
        response, status = database_error(error, 'Failed to add student', {UNIQUE: 'Roll number already exists'})
        assert status == 500
        assert response.get_json()['error'].startswith('Failed to add student: ')


class TestConstraintRaces:
    """
    Another request can insert the same row between the pre-check and
    the commit. The database constraint must still give the 400 message.
    """

    def test_duplicate_class(self, client, create, monkeypatch):
        create('classes', class_name='Grade One', class_number=1)
        monkeypatch.setattr(routes.classes, 'class_exists', lambda class_number: False)

        response = client.post('/api/classes', json={'class_name': 'Other', 'class_number': 1})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Class already exists'

    def test_duplicate_roll_number(self, client, school, monkeypatch):
        monkeypatch.setattr(routes.students, 'check_references', lambda form, exclude_id=None: None)

        response = client.post('/api/students', json={
            'roll_number': 'A101', 'name': 'Ali Raza', 'fname': 'Hamid Raza', 'class_number': 1
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Roll number already exists'

    def test_student_in_missing_class(self, client, school, monkeypatch):
        monkeypatch.setattr(routes.students, 'check_references', lambda form, exclude_id=None: None)

        response = client.post('/api/students', json={
            'roll_number': 'B202', 'name': 'Ali Raza', 'fname': 'Hamid Raza', 'class_number': 9
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Class does not exist'

    def test_duplicate_email(self, client, school, monkeypatch):
        monkeypatch.setattr(routes.teachers, 'email_taken', lambda email, exclude_id=None: False)

        response = client.post('/api/teachers', json={'name': 'Jane Roe', 'email': 'john@school.edu'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Email already exists'

    def test_duplicate_subject(self, client, school, monkeypatch):
        monkeypatch.setattr(routes.subjects, 'check_references', lambda form: None)

        response = client.post('/api/subjects', json={'subject_name': 'Mathematics', 'class_number': 1})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Subject already exists in this class'

    def test_subject_in_missing_class(self, client, school, monkeypatch):
        monkeypatch.setattr(routes.subjects, 'check_references', lambda form: None)

        response = client.post('/api/subjects', json={'subject_name': 'Science', 'class_number': 9})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Class does not exist'

    def test_duplicate_assignment(self, client, school, monkeypatch):
        monkeypatch.setattr(routes.teacher_assignments, 'check_references', lambda form, exclude_id=None: None)

        response = client.post('/api/teacher-assignments', json={
            'teacher_id': school['teacher_id'], 'class_number': 1, 'subject_id': school['subject_id']
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == (
            'Teacher is already assigned to this subject in the specified class'
        )

    def test_assignment_with_missing_teacher(self, client, school, monkeypatch):
        monkeypatch.setattr(routes.teacher_assignments, 'check_references', lambda form, exclude_id=None: None)

        response = client.post('/api/teacher-assignments', json={
            'teacher_id': 999, 'class_number': 1, 'subject_id': school['subject_id']
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid teacher, class, or subject ID'

    def test_failed_insert_leaves_session_usable(self, client, create, monkeypatch):
        create('classes', class_name='Grade One', class_number=1)
        monkeypatch.setattr(routes.classes, 'class_exists', lambda class_number: False)

        assert client.post('/api/classes', json={'class_name': 'Other', 'class_number': 1}).status_code == 400
        assert client.post('/api/classes', json={'class_name': 'Grade Two', 'class_number': 2}).status_code == 200
        assert len(client.get('/api/classes').get_json()['classes']) == 2


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
