"""
Student Model
Represents enrolled learners, attached to a class by class number
"""

from extensions import db
from sqlalchemy.orm import validates
from models.base import BaseModel
from utils.validation import GENDERS


class Student(BaseModel):
    __tablename__ = 'students'

    # ============ CORE IDENTIFIERS ============
    student_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    roll_number = db.Column(db.String(20), unique=True, nullable=False)

    # ============ BIO DATA ============
    name = db.Column(db.String(100), nullable=False)
    fname = db.Column(db.String(100), nullable=False)  # father's name
    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(10), nullable=True)

    # ============ CONTACT ============
    address = db.Column(db.String(500), nullable=True)
    phone = db.Column(db.String(20), nullable=True)

    # ============ ACADEMIC ============
    class_number = db.Column(
        db.Integer,
        db.ForeignKey('classes.class_number', onupdate='CASCADE'),
        nullable=False,
        index=True
    )

    # ============ VALIDATION ============
    @validates('gender')
    def validate_gender(self, key, value):
        if value and value not in GENDERS:
            raise ValueError('Gender must be Male, Female, or Other')
        return value or None

    def __repr__(self):
        return f'<Student {self.name} ({self.roll_number})>'
