from datetime import date

from app import create_app
from extensions import db
from models.class_model import Class
from models.teacher import Teacher
from models.student import Student
from models.subject import Subject
from models.teacher_assignment import TeacherAssignment
from models.exam_record import ExamRecord

app = create_app()

with app.app_context():
    db.drop_all()
    db.create_all()

    classes = [
        Class(class_name="Grade One", class_number=1),
        Class(class_name="Grade Two", class_number=2),
        Class(class_name="Grade Three", class_number=3),
    ]
    db.session.add_all(classes)
    db.session.commit()

    t1 = Teacher(
        name="John Doe", email="john.doe@school.edu", phone="555-123-4567",
        qualification="M.Sc", age=42, gender="Male", hire_date=date(2015, 8, 1)
    )
    t2 = Teacher(
        name="Sara Khan", email="sara.khan@school.edu", phone="555 987 6543",
        qualification="B.Ed", age=35, gender="Female", hire_date=date(2019, 1, 15)
    )
    db.session.add_all([t1, t2])

    students = [
        Student(roll_number="A101", name="Mary Jane", fname="Peter Jane", age=6,
                class_number=1, gender="Female", address="12 Oak Street", phone="5550001111"),
        Student(roll_number="A102", name="Ali Raza", fname="Hamid Raza", age=7,
                class_number=1, gender="Male"),
        Student(roll_number="B201", name="Tom Brown", fname="James Brown", age=8,
                class_number=2, gender="Male", address="4 Elm Road"),
    ]
    db.session.add_all(students)

    subjects = [
        Subject(subject_name="Mathematics", class_number=1),
        Subject(subject_name="English", class_number=1),
        Subject(subject_name="Science", class_number=2, max_marks=50),
    ]
    db.session.add_all(subjects)
    db.session.commit()

    db.session.add_all([
        TeacherAssignment(teacher_id=t1.teacher_id, class_number=1, subject_id=subjects[0].subject_id),
        TeacherAssignment(teacher_id=t2.teacher_id, class_number=1, subject_id=subjects[1].subject_id),
        TeacherAssignment(teacher_id=t1.teacher_id, class_number=2, subject_id=subjects[2].subject_id),
    ])
    db.session.add_all([
        ExamRecord(student_id=students[0].student_id, subject_id=subjects[0].subject_id,
                   marks_obtained=88, exam_date=date(2024, 3, 10)),
        ExamRecord(student_id=students[2].student_id, subject_id=subjects[2].subject_id,
                   marks_obtained=41, exam_date=date(2024, 3, 12)),
    ])
    db.session.commit()

    print("✅ Database seeded successfully")
