import logging
from flask import Blueprint
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models.teacher_assignment import TeacherAssignment
from models.teacher import Teacher
from models.subject import Subject
from models.class_model import Class
from utils.responses import (
    FOREIGN_KEY, UNIQUE, database_error, error_response, get_json_body,
    success_response, validation_error,
)
from utils.validation import normalize_assignment, validate_assignment

logger = logging.getLogger(__name__)

teacher_assignments_bp = Blueprint('teacher_assignments', __name__)

DUPLICATE_ASSIGNMENT = 'Teacher is already assigned to this subject in the specified class'
INVALID_REFERENCE = 'Invalid teacher, class, or subject ID'


def assignments_with_names():
    """Select assignments with teacher, subject and class names"""
    return (
        db.select(TeacherAssignment, Teacher.name, Subject.subject_name, Class.class_name)
        .outerjoin(Teacher, TeacherAssignment.teacher_id == Teacher.teacher_id)
        .outerjoin(Subject, TeacherAssignment.subject_id == Subject.subject_id)
        .outerjoin(Class, TeacherAssignment.class_number == Class.class_number)
    )


def serialize_assignment(row):
    assignment, teacher_name, subject_name, class_name = row
    assignment_dict = assignment.to_dict()
    assignment_dict['teacher_name'] = teacher_name
    assignment_dict['subject_name'] = subject_name
    assignment_dict['class_name'] = class_name
    return assignment_dict


def fetch_assignment(assignment_id):
    row = db.session.execute(
        assignments_with_names().where(TeacherAssignment.assignment_id == assignment_id)
    ).first()
    return serialize_assignment(row) if row else None


def check_references(form, exclude_id=None):
    """
    Every part of the triple must exist, the subject must be taught in
    the class, and the triple must not be assigned already.
    """
    if not db.session.get(Teacher, form['teacher_id']):
        return 'Teacher does not exist'

    if not Class.query.filter_by(class_number=form['class_number']).first():
        return 'Class does not exist'

    subject = db.session.get(Subject, form['subject_id'])
    if not subject:
        return 'Subject does not exist'

    if subject.class_number != form['class_number']:
        return 'Subject does not belong to the specified class'

    duplicate = TeacherAssignment.query.filter_by(
        teacher_id=form['teacher_id'],
        class_number=form['class_number'],
        subject_id=form['subject_id']
    )
    if exclude_id is not None:
        duplicate = duplicate.filter(TeacherAssignment.assignment_id != exclude_id)

    if duplicate.first():
        return DUPLICATE_ASSIGNMENT

    return None


@teacher_assignments_bp.route('', methods=['GET'])
def get_assignments():
    """
    Get all teacher assignments, newest first
    """
    try:
        rows = db.session.execute(
            assignments_with_names().order_by(
                TeacherAssignment.created_at.desc(),
                TeacherAssignment.assignment_id.desc()
            )
        ).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch teacher assignments')

    return success_response(assignments=[serialize_assignment(row) for row in rows])


@teacher_assignments_bp.route('/<int:assignment_id>', methods=['GET'])
def get_assignment(assignment_id):
    """
    Get assignment by id
    """
    try:
        assignment = fetch_assignment(assignment_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch assignment')

    if not assignment:
        return error_response('Assignment not found', 404)

    return success_response(assignment=assignment)


@teacher_assignments_bp.route('', methods=['POST'])
def create_assignment():
    """
    Assign a teacher to a subject in a class
    """
    form = normalize_assignment(get_json_body())

    errors = validate_assignment(form)
    if errors:
        return validation_error(errors)

    try:
        problem = check_references(form)
        if problem:
            return error_response(problem, 400)

        assignment = TeacherAssignment(**form)

        db.session.add(assignment)
        db.session.commit()

        logger.info(
            "Assigned teacher %s to subject %s in class %s",
            assignment.teacher_id, assignment.subject_id, assignment.class_number
        )

        return success_response(
            assignmentId=assignment.assignment_id,
            assignment=fetch_assignment(assignment.assignment_id),
            message='Teacher assigned successfully!'
        )

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to create assignment', {
            UNIQUE: DUPLICATE_ASSIGNMENT,
            FOREIGN_KEY: INVALID_REFERENCE
        })


@teacher_assignments_bp.route('/<int:assignment_id>', methods=['PUT'])
def update_assignment(assignment_id):
    """
    Move an assignment to another teacher / class / subject
    """
    form = normalize_assignment(get_json_body())

    errors = validate_assignment(form)
    if errors:
        return validation_error(errors)

    try:
        assignment = db.session.get(TeacherAssignment, assignment_id)

        if not assignment:
            return error_response('Assignment not found', 404)

        problem = check_references(form, exclude_id=assignment_id)
        if problem:
            return error_response(problem, 400)

        assignment.update(**form)
        db.session.commit()

        return success_response(
            assignment=fetch_assignment(assignment_id),
            message='Assignment updated successfully'
        )

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to update assignment', {
            UNIQUE: DUPLICATE_ASSIGNMENT,
            FOREIGN_KEY: INVALID_REFERENCE
        })


@teacher_assignments_bp.route('/<int:assignment_id>', methods=['DELETE'])
def delete_assignment(assignment_id):
    """
    Remove an assignment
    """
    try:
        assignment = db.session.get(TeacherAssignment, assignment_id)

        if not assignment:
            return error_response('Assignment not found', 404)

        db.session.delete(assignment)
        db.session.commit()

        return success_response(message='Assignment deleted successfully')

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to delete assignment')
