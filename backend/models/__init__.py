# models/__init__.py
from .class_model import Class
from .student import Student
from .teacher import Teacher
from .subject import Subject
from .teacher_assignment import TeacherAssignment
from .exam_record import ExamRecord

__all__ = ['Class', 'Student', 'Teacher', 'Subject', 'TeacherAssignment', 'ExamRecord']
