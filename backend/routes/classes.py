import logging
from flask import Blueprint
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models.class_model import Class
from models.student import Student
from models.subject import Subject
from models.teacher_assignment import TeacherAssignment
from utils.responses import (
    FOREIGN_KEY, UNIQUE, database_error, error_response, get_json_body,
    success_response, validation_error,
)
from utils.validation import normalize_class, validate_class

logger = logging.getLogger(__name__)

classes_bp = Blueprint('classes', __name__)

DUPLICATE_CLASS = 'Class already exists'


def _count_subquery(column, key_column, distinct=False):
    counted = func.count(func.distinct(column)) if distinct else func.count(column)
    return db.select(counted).where(key_column == Class.class_number).scalar_subquery()


def classes_with_counts():
    """Select every class with its student / teacher / subject counts"""
    return db.select(
        Class,
        _count_subquery(Student.student_id, Student.class_number).label('student_count'),
        _count_subquery(TeacherAssignment.teacher_id, TeacherAssignment.class_number,
                        distinct=True).label('teacher_count'),
        _count_subquery(Subject.subject_id, Subject.class_number).label('subject_count'),
    )


def serialize_class(row):
    class_obj, student_count, teacher_count, subject_count = row
    class_dict = class_obj.to_dict()
    class_dict['student_count'] = student_count or 0
    class_dict['teacher_count'] = teacher_count or 0
    class_dict['subject_count'] = subject_count or 0
    return class_dict


def class_exists(class_number):
    return Class.query.filter_by(class_number=class_number).first() is not None


@classes_bp.route('', methods=['GET'])
def get_classes():
    """
    Get all classes with student, teacher and subject counts
    """
    try:
        rows = db.session.execute(
            classes_with_counts().order_by(Class.class_number)
        ).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch classes')

    return success_response(classes=[serialize_class(row) for row in rows])


@classes_bp.route('/<int:class_id>', methods=['GET'])
def get_class(class_id):
    """
    Get a single class by id
    """
    try:
        row = db.session.execute(
            classes_with_counts().where(Class.class_id == class_id)
        ).first()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch class')

    if not row:
        return error_response('Class not found', 404)

    return success_response(**{'class': serialize_class(row)})


@classes_bp.route('', methods=['POST'])
def create_class():
    """
    Create new class
    """
    form = normalize_class(get_json_body())

    errors = validate_class(form)
    if errors:
        return validation_error(errors)

    try:
        # Check for duplicate class number
        if class_exists(form['class_number']):
            return error_response(DUPLICATE_CLASS, 400)

        class_obj = Class(
            class_name=form['class_name'],
            class_number=form['class_number']
        )

        db.session.add(class_obj)
        db.session.commit()

        logger.info("Created class %s (%s)", class_obj.class_number, class_obj.class_name)

        row = db.session.execute(
            classes_with_counts().where(Class.class_id == class_obj.class_id)
        ).first()

        return success_response(**{
            'classId': class_obj.class_id,
            'class': serialize_class(row),
            'message': 'Class added successfully'
        })

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to add class to database', {UNIQUE: DUPLICATE_CLASS})


@classes_bp.route('/<int:class_id>', methods=['PUT'])
def update_class(class_id):
    """
    Update class name / number. Dependents follow a renumbered class.
    """
    form = normalize_class(get_json_body())

    errors = validate_class(form)
    if errors:
        return validation_error(errors)

    try:
        class_obj = db.session.get(Class, class_id)

        if not class_obj:
            return error_response('Class not found', 404)

        duplicate = Class.query.filter(
            Class.class_number == form['class_number'],
            Class.class_id != class_id
        ).first()

        if duplicate:
            return error_response(DUPLICATE_CLASS, 400)

        class_obj.update(
            class_name=form['class_name'],
            class_number=form['class_number']
        )
        db.session.commit()

        row = db.session.execute(
            classes_with_counts().where(Class.class_id == class_id)
        ).first()

        return success_response(**{
            'class': serialize_class(row),
            'message': 'Class updated successfully'
        })

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to update class', {UNIQUE: DUPLICATE_CLASS})


@classes_bp.route('/<int:class_id>', methods=['DELETE'])
def delete_class(class_id):
    """
    Delete class. Refused by the database while rows still reference it.
    """
    try:
        class_obj = db.session.get(Class, class_id)

        if not class_obj:
            return error_response('Class not found', 404)

        class_number = class_obj.class_number
        db.session.delete(class_obj)
        db.session.commit()

        logger.info("Deleted class %s", class_number)

        return success_response(message='Class deleted successfully')

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to delete class', {
            FOREIGN_KEY: 'Cannot delete class with existing students, subjects or assignments'
        })
