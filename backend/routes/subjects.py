#routes/subjects.py
import logging
from flask import Blueprint
from sqlalchemy import delete, func
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models.subject import Subject
from models.class_model import Class
from models.student import Student
from models.teacher_assignment import TeacherAssignment
from models.exam_record import ExamRecord
from utils.responses import (
    FOREIGN_KEY, UNIQUE, database_error, error_response, get_json_body,
    success_response, validation_error,
)
from utils.validation import DEFAULT_MAX_MARKS, normalize_subject, validate_subject

logger = logging.getLogger(__name__)

subjects_bp = Blueprint('subjects', __name__)

CLASS_MISSING = 'Class does not exist'
DUPLICATE_SUBJECT = 'Subject already exists in this class'
DUPLICATE_SUBJECT_NAME = 'Subject name already exists in this class'


def subjects_with_class(with_student_count=False):
    """
    Select subjects joined with their class name, optionally with the
    number of students enrolled in that class
    """
    columns = [Subject, Class.class_name]
    if with_student_count:
        columns.append(
            db.select(func.count(Student.student_id))
            .where(Student.class_number == Subject.class_number)
            .scalar_subquery()
            .label('student_count')
        )

    return db.select(*columns).join(Class, Subject.class_number == Class.class_number)


def serialize_subject(row):
    subject, class_name = row[0], row[1]
    subject_dict = subject.to_dict()
    subject_dict['class_name'] = class_name
    if len(row) > 2:
        subject_dict['student_count'] = row[2] or 0
    return subject_dict


def fetch_subject(subject_id):
    row = db.session.execute(
        subjects_with_class().where(Subject.subject_id == subject_id)
    ).first()
    return serialize_subject(row) if row else None


def check_references(form):
    """Class must exist and the name must be free in it; None when both hold"""
    if not Class.query.filter_by(class_number=form['class_number']).first():
        return CLASS_MISSING

    existing = Subject.query.filter_by(
        subject_name=form['subject_name'],
        class_number=form['class_number']
    ).first()

    if existing:
        return DUPLICATE_SUBJECT

    return None


def delete_assignments_for(subject_id):
    db.session.execute(delete(TeacherAssignment).where(TeacherAssignment.subject_id == subject_id))


def delete_exam_records_for(subject_id):
    db.session.execute(delete(ExamRecord).where(ExamRecord.subject_id == subject_id))


def delete_subject_row(subject_id):
    db.session.execute(delete(Subject).where(Subject.subject_id == subject_id))


@subjects_bp.route('', methods=['GET'])
def get_subjects():
    """
    List all subjects with class name and class size
    """
    try:
        rows = db.session.execute(
            subjects_with_class(with_student_count=True)
            .order_by(Subject.class_number, Subject.subject_name)
        ).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch subjects')

    return success_response(subjects=[serialize_subject(row) for row in rows])


@subjects_bp.route('/<int:subject_id>', methods=['GET'])
def get_subject(subject_id):
    """
    Get specific subject details
    """
    try:
        subject = fetch_subject(subject_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch subject')

    if not subject:
        return error_response('Subject not found', 404)

    return success_response(subject=subject)


@subjects_bp.route('/class/<int:class_number>', methods=['GET'])
def get_subjects_by_class(class_number):
    """
    Get subjects taught in one class
    """
    try:
        rows = db.session.execute(
            subjects_with_class(with_student_count=True)
            .where(Subject.class_number == class_number)
            .order_by(Subject.subject_name)
        ).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch subjects for class')

    return success_response(subjects=[serialize_subject(row) for row in rows])


@subjects_bp.route('', methods=['POST'])
def create_subject():
    """
    Create new subject
    """
    form = normalize_subject(get_json_body())

    errors = validate_subject(form)
    if errors:
        return validation_error(errors)

    try:
        problem = check_references(form)
        if problem:
            return error_response(problem, 400)

        subject = Subject(
            subject_name=form['subject_name'],
            class_number=form['class_number'],
            max_marks=form['max_marks'] or DEFAULT_MAX_MARKS
        )

        db.session.add(subject)
        db.session.commit()

        logger.info("Created subject %s for class %s", subject.subject_name, subject.class_number)

        return success_response(
            subjectId=subject.subject_id,
            subject=fetch_subject(subject.subject_id),
            message='Subject added successfully'
        )

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to add subject to database', {
            UNIQUE: DUPLICATE_SUBJECT,
            FOREIGN_KEY: CLASS_MISSING
        })


@subjects_bp.route('/<int:subject_id>', methods=['PUT'])
def update_subject(subject_id):
    """
    Update subject name and maximum marks. A subject stays in its class.
    """
    form = normalize_subject(get_json_body())

    errors = validate_subject(form, require_class=False)
    if errors:
        return validation_error(errors)

    try:
        subject = db.session.get(Subject, subject_id)

        if not subject:
            return error_response('Subject not found', 404)

        duplicate = Subject.query.filter(
            Subject.subject_name == form['subject_name'],
            Subject.class_number == subject.class_number,
            Subject.subject_id != subject_id
        ).first()

        if duplicate:
            return error_response(DUPLICATE_SUBJECT_NAME, 400)

        subject.update(
            subject_name=form['subject_name'],
            max_marks=form['max_marks'] or DEFAULT_MAX_MARKS
        )
        db.session.commit()

        return success_response(
            subject=fetch_subject(subject_id),
            message='Subject updated successfully'
        )

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to update subject', {UNIQUE: DUPLICATE_SUBJECT_NAME})


@subjects_bp.route('/<int:subject_id>', methods=['DELETE'])
def delete_subject(subject_id):
    """
    Delete subject together with its teacher assignments and exam
    records. All three deletes commit together or not at all.
    """
    try:
        subject = db.session.get(Subject, subject_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to delete subject')

    if not subject:
        return error_response('Subject not found', 404)

    try:
        delete_assignments_for(subject_id)
        delete_exam_records_for(subject_id)
        delete_subject_row(subject_id)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("[DB] Subject %s delete rolled back: %s", subject_id, e)
        return error_response('Failed to delete subject', 500)

    logger.info("Deleted subject %s with its assignments and exam records", subject_id)

    return success_response(message='Subject deleted successfully')


@subjects_bp.route('/search/<query>', methods=['GET'])
def search_subjects(query):
    """
    Search subjects by subject or class name
    """
    pattern = f'%{query}%'

    try:
        rows = db.session.execute(
            subjects_with_class(with_student_count=True)
            .where(db.or_(
                Subject.subject_name.ilike(pattern),
                Class.class_name.ilike(pattern)
            ))
            .order_by(Subject.subject_name)
        ).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to search subjects')

    subjects = [serialize_subject(row) for row in rows]

    return success_response(subjects=subjects, count=len(subjects))


@subjects_bp.route('/stats/summary', methods=['GET'])
def subject_stats():
    """
    Totals, per-class subject counts and max-marks statistics
    """
    try:
        total = db.session.scalar(db.select(func.count(Subject.subject_id)))

        class_rows = db.session.execute(
            db.select(Class.class_name, Class.class_number, func.count(Subject.subject_id))
            .outerjoin(Subject, Subject.class_number == Class.class_number)
            .group_by(Class.class_id, Class.class_name, Class.class_number)
            .order_by(Class.class_number)
        ).all()

        average_marks, min_marks, max_marks = db.session.execute(
            db.select(func.avg(Subject.max_marks), func.min(Subject.max_marks), func.max(Subject.max_marks))
            .where(Subject.max_marks.isnot(None))
        ).one()

    except SQLAlchemyError as e:
        db.session.rollback()
        return database_error(e, 'Failed to fetch subject statistics')

    return success_response(stats={
        'total': total,
        'classes': [
            {'class_name': name, 'class_number': number, 'subject_count': count}
            for name, number, count in class_rows
        ],
        'marks': {
            'average_marks': float(average_marks) if average_marks is not None else None,
            'min_marks': min_marks,
            'max_marks': max_marks
        }
    })
