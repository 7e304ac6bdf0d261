"""
Exam Record Model
Marks obtained by a student in a subject. Rows go away with their
student (database cascade) or their subject (explicit transaction).
"""
from extensions import db
from models.base import BaseModel


class ExamRecord(BaseModel):
    __tablename__ = 'exam_records'

    record_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.student_id', ondelete='CASCADE'), nullable=False, index=True)
    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.subject_id'), nullable=False, index=True)

    marks_obtained = db.Column(db.Integer, nullable=True)
    exam_date = db.Column(db.Date, nullable=True)

    def __repr__(self):
        return f'<ExamRecord student={self.student_id} subject={self.subject_id}>'
