import logging
from flask import Blueprint
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models.teacher import Teacher
from models.teacher_assignment import TeacherAssignment
from utils.responses import (
    FOREIGN_KEY, UNIQUE, database_error, error_response, get_json_body,
    success_response, validation_error,
)
from utils.validation import normalize_teacher, parse_date, validate_teacher

logger = logging.getLogger(__name__)

teachers_bp = Blueprint('teachers', __name__)

DUPLICATE_EMAIL = 'Email already exists'
HAS_ASSIGNMENTS = 'Cannot delete teacher with existing assignments. Please remove assignments first.'


def teacher_fields(form):
    fields = dict(form)
    fields['hire_date'] = parse_date(form['hire_date'])
    return fields


def email_taken(email, exclude_id=None):
    if not email:
        return False

    query = Teacher.query.filter(Teacher.email == email)
    if exclude_id is not None:
        query = query.filter(Teacher.teacher_id != exclude_id)

    return query.first() is not None


@teachers_bp.route('', methods=['GET'])
def get_teachers():
    """
    Get all teachers ordered by name
    """
    try:
        teachers = Teacher.query.order_by(Teacher.name).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch teachers')

    return success_response(teachers=[teacher.to_dict() for teacher in teachers])


@teachers_bp.route('/<int:teacher_id>', methods=['GET'])
def get_teacher(teacher_id):
    """
    Get specific teacher details
    """
    try:
        teacher = db.session.get(Teacher, teacher_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch teacher')

    if not teacher:
        return error_response('Teacher not found', 404)

    return success_response(teacher=teacher.to_dict())


@teachers_bp.route('', methods=['POST'])
def create_teacher():
    """
    Create new teacher
    """
    form = normalize_teacher(get_json_body())

    errors = validate_teacher(form)
    if errors:
        return validation_error(errors)

    try:
        if email_taken(form['email']):
            return error_response(DUPLICATE_EMAIL, 400)

        teacher = Teacher(**teacher_fields(form))

        db.session.add(teacher)
        db.session.commit()

        logger.info("Created teacher %s (%s)", teacher.teacher_id, teacher.name)

        return success_response(
            teacherId=teacher.teacher_id,
            teacher=teacher.to_dict(),
            message='Teacher added successfully!'
        )

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to add teacher to database', {UNIQUE: DUPLICATE_EMAIL})


@teachers_bp.route('/<int:teacher_id>', methods=['PUT'])
def update_teacher(teacher_id):
    """
    Update teacher information
    """
    form = normalize_teacher(get_json_body())

    errors = validate_teacher(form)
    if errors:
        return validation_error(errors)

    try:
        teacher = db.session.get(Teacher, teacher_id)

        if not teacher:
            return error_response('Teacher not found', 404)

        if email_taken(form['email'], exclude_id=teacher_id):
            return error_response(DUPLICATE_EMAIL, 400)

        teacher.update(**teacher_fields(form))
        db.session.commit()

        return success_response(
            teacher=teacher.to_dict(),
            message='Teacher updated successfully'
        )

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to update teacher', {UNIQUE: DUPLICATE_EMAIL})


@teachers_bp.route('/<int:teacher_id>', methods=['DELETE'])
def delete_teacher(teacher_id):
    """
    Delete teacher. Refused while the teacher still has assignments.
    """
    try:
        teacher = db.session.get(Teacher, teacher_id)

        if not teacher:
            return error_response('Teacher not found', 404)

        has_assignments = TeacherAssignment.query.filter_by(teacher_id=teacher_id).first()
        if has_assignments:
            return error_response(HAS_ASSIGNMENTS, 400)

        db.session.delete(teacher)
        db.session.commit()

        logger.info("Deleted teacher %s", teacher_id)

        return success_response(message='Teacher deleted successfully')

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to delete teacher', {FOREIGN_KEY: HAS_ASSIGNMENTS})
