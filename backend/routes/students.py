import logging
from flask import Blueprint
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models.student import Student
from models.class_model import Class
from utils.responses import (
    FOREIGN_KEY, UNIQUE, database_error, error_response, get_json_body,
    success_response, validation_error,
)
from utils.validation import normalize_student, validate_student

logger = logging.getLogger(__name__)

students_bp = Blueprint('students', __name__)

CLASS_MISSING = 'Class does not exist'
DUPLICATE_ROLL = 'Roll number already exists'


def students_with_class():
    """Select students together with the name of their class"""
    return db.select(Student, Class.class_name).outerjoin(
        Class, Student.class_number == Class.class_number
    )


def serialize_student(row):
    student, class_name = row
    student_dict = student.to_dict()
    student_dict['class_name'] = class_name
    return student_dict


def fetch_student(student_id):
    row = db.session.execute(
        students_with_class().where(Student.student_id == student_id)
    ).first()
    return serialize_student(row) if row else None


def check_references(form, exclude_id=None):
    """
    Existence and uniqueness pre-checks before a write.
    Returns an error message or None. The unique index stays the
    source of truth; this only gives a friendlier message.
    """
    if not Class.query.filter_by(class_number=form['class_number']).first():
        return CLASS_MISSING

    duplicate = Student.query.filter(Student.roll_number == form['roll_number'])
    if exclude_id is not None:
        duplicate = duplicate.filter(Student.student_id != exclude_id)

    if duplicate.first():
        return DUPLICATE_ROLL

    return None


@students_bp.route('', methods=['GET'])
def get_students():
    """
    Get all students with class info
    """
    try:
        rows = db.session.execute(
            students_with_class().order_by(Student.class_number, Student.name)
        ).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch students')

    return success_response(students=[serialize_student(row) for row in rows])


@students_bp.route('/<int:student_id>', methods=['GET'])
def get_student(student_id):
    """
    Get specific student details
    """
    try:
        student = fetch_student(student_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch student')

    if not student:
        return error_response('Student not found', 404)

    return success_response(student=student)


@students_bp.route('/class/<int:class_number>', methods=['GET'])
def get_students_by_class(class_number):
    """
    Get all students in a class, ordered by roll number
    """
    try:
        rows = db.session.execute(
            students_with_class()
            .where(Student.class_number == class_number)
            .order_by(Student.roll_number, Student.name)
        ).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch students for class')

    return success_response(students=[serialize_student(row) for row in rows])


@students_bp.route('', methods=['POST'])
def create_student():
    """
    Create new student
    """
    form = normalize_student(get_json_body())

    errors = validate_student(form)
    if errors:
        return validation_error(errors)

    try:
        problem = check_references(form)
        if problem:
            return error_response(problem, 400)

        student = Student(**form)

        db.session.add(student)
        db.session.commit()

        logger.info("Created student %s in class %s", student.roll_number, student.class_number)

        return success_response(
            studentId=student.student_id,
            student=fetch_student(student.student_id),
            message='Student added successfully'
        )

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to add student to database', {
            UNIQUE: DUPLICATE_ROLL,
            FOREIGN_KEY: CLASS_MISSING
        })


@students_bp.route('/<int:student_id>', methods=['PUT'])
def update_student(student_id):
    """
    Update student information
    """
    form = normalize_student(get_json_body())

    errors = validate_student(form)
    if errors:
        return validation_error(errors)

    try:
        student = db.session.get(Student, student_id)

        if not student:
            return error_response('Student not found', 404)

        problem = check_references(form, exclude_id=student_id)
        if problem:
            return error_response(problem, 400)

        student.update(**form)
        db.session.commit()

        return success_response(
            student=fetch_student(student_id),
            message='Student updated successfully'
        )

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to update student', {
            UNIQUE: DUPLICATE_ROLL,
            FOREIGN_KEY: CLASS_MISSING
        })


@students_bp.route('/<int:student_id>', methods=['DELETE'])
def delete_student(student_id):
    """
    Delete student. Exam records go with it (ON DELETE CASCADE).
    """
    try:
        student = db.session.get(Student, student_id)

        if not student:
            return error_response('Student not found', 404)

        db.session.delete(student)
        db.session.commit()

        return success_response(message='Student deleted successfully')

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to delete student')


@students_bp.route('/search/<query>', methods=['GET'])
def search_students(query):
    """
    Search students by name, roll number or father name
    """
    pattern = f'%{query}%'

    try:
        rows = db.session.execute(
            students_with_class()
            .where(db.or_(
                Student.name.ilike(pattern),
                Student.roll_number.ilike(pattern),
                Student.fname.ilike(pattern)
            ))
            .order_by(Student.name)
        ).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to search students')

    students = [serialize_student(row) for row in rows]

    return success_response(students=students, count=len(students))


@students_bp.route('/stats/summary', methods=['GET'])
def student_stats():
    """
    Totals, gender breakdown, per-class counts and age statistics
    """
    try:
        total = db.session.scalar(db.select(func.count(Student.student_id)))

        gender_rows = db.session.execute(
            db.select(Student.gender, func.count(Student.student_id))
            .where(Student.gender.isnot(None))
            .group_by(Student.gender)
        ).all()

        class_rows = db.session.execute(
            db.select(Class.class_name, Class.class_number, func.count(Student.student_id))
            .outerjoin(Student, Student.class_number == Class.class_number)
            .group_by(Class.class_id, Class.class_name, Class.class_number)
            .order_by(Class.class_number)
        ).all()

        average_age, min_age, max_age = db.session.execute(
            db.select(func.avg(Student.age), func.min(Student.age), func.max(Student.age))
            .where(Student.age.isnot(None))
        ).one()

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch student statistics')

    return success_response(stats={
        'total': total,
        'gender': [{'gender': gender, 'count': count} for gender, count in gender_rows],
        'classes': [
            {'class_name': name, 'class_number': number, 'student_count': count}
            for name, number, count in class_rows
        ],
        'age': {
            'average_age': float(average_age) if average_age is not None else None,
            'min_age': min_age,
            'max_age': max_age
        }
    })
