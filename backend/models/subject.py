"""
Subject Model
Represents a subject taught in one class
"""
from extensions import db
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import validates
from models.base import BaseModel
from utils.validation import DEFAULT_MAX_MARKS


class Subject(BaseModel):
    __tablename__ = 'subjects'

    # =====================
    # CORE IDENTIFIERS
    # =====================
    subject_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    class_number = db.Column(
        db.Integer,
        db.ForeignKey('classes.class_number', onupdate='CASCADE'),
        nullable=False,
        index=True
    )

    # =====================
    # SUBJECT DETAILS
    # =====================
    subject_name = db.Column(db.String(100), nullable=False)   # Mathematics, English
    max_marks = db.Column(db.Integer, nullable=False, default=DEFAULT_MAX_MARKS)

    # =====================
    # CONSTRAINTS
    # =====================
    __table_args__ = (
        UniqueConstraint(
            'subject_name',
            'class_number',
            name='uq_subject_name_per_class'
        ),
    )

    # =====================
    # VALIDATION
    # =====================
    @validates('subject_name')
    def validate_subject_name(self, key, value):
        if not value or not value.strip():
            raise ValueError("Subject name is required")
        return value.strip()

    @validates('max_marks')
    def validate_max_marks(self, key, value):
        if value is None:
            return DEFAULT_MAX_MARKS
        if value < 1:
            raise ValueError("Maximum marks must be at least 1")
        return value

    def __repr__(self):
        return f"<Subject {self.subject_name} ({self.class_number})>"
