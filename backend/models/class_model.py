"""
Class Model
Represents a grade/section identified by a unique class number
"""

from extensions import db
from sqlalchemy.orm import validates
from models.base import BaseModel


class Class(BaseModel):
    __tablename__ = 'classes'

    # ============ CORE IDENTIFIERS ============
    class_id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    # Natural key referenced by students, subjects and assignments
    class_number = db.Column(db.Integer, unique=True, nullable=False)

    # ============ CLASS IDENTITY ============
    class_name = db.Column(db.String(100), nullable=False)
    # Examples: Grade One, Class 10 A

    # ============ VALIDATION ============
    @validates('class_name')
    def validate_class_name(self, key, value):
        if not value or not value.strip():
            raise ValueError("Class name is required")
        return value.strip()

    def __repr__(self):
        return f'<Class {self.class_name} ({self.class_number})>'
