"""
Teacher Assignment Model
A (teacher, class, subject) triple: who teaches what to whom
"""
from extensions import db
from sqlalchemy import UniqueConstraint
from models.base import BaseModel


class TeacherAssignment(BaseModel):
    __tablename__ = 'teacher_assignments'

    assignment_id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.teacher_id'), nullable=False, index=True)
    class_number = db.Column(
        db.Integer,
        db.ForeignKey('classes.class_number', onupdate='CASCADE'),
        nullable=False,
        index=True
    )
    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.subject_id'), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint(
            'teacher_id',
            'class_number',
            'subject_id',
            name='uq_teacher_class_subject'
        ),
    )

    def __repr__(self):
        return f'<TeacherAssignment teacher={self.teacher_id} class={self.class_number} subject={self.subject_id}>'
