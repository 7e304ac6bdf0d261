"""
Teacher Model
Represents teaching staff
"""

from extensions import db
from sqlalchemy.orm import validates
from models.base import BaseModel
from utils.validation import GENDERS


class Teacher(BaseModel):
    __tablename__ = 'teachers'

    # ============ CORE IDENTIFIERS ============
    teacher_id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    # ============ BIO DATA ============
    name = db.Column(db.String(100), nullable=False)
    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(10), nullable=True)
    qualification = db.Column(db.String(100), nullable=True)

    # ============ CONTACT ============
    # NULLs never collide, so several teachers may omit the email
    email = db.Column(db.String(120), unique=True, nullable=True)
    phone = db.Column(db.String(20), nullable=True)

    # ============ EMPLOYMENT ============
    hire_date = db.Column(db.Date, nullable=True)

    # ============ VALIDATION ============
    @validates('gender')
    def validate_gender(self, key, value):
        if value and value not in GENDERS:
            raise ValueError('Gender must be Male, Female, or Other')
        return value or None

    @validates('email')
    def validate_email(self, key, email):
        # Empty strings would break the unique index for teachers without email
        return email.strip() if email and email.strip() else None

    def __repr__(self):
        return f'<Teacher {self.name} ({self.teacher_id})>'
