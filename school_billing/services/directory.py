# school_billing/services/directory.py
"""
Read-only lookups into the student and class records.

Student and class CRUD live outside the billing core; the core only needs
to know who is enrolled where and what to print as their name.
"""

from typing import List, Optional

from sqlalchemy import select, exists
from sqlalchemy.orm import Session

from school_billing.models.school import SchoolClass, Student


class StudentDirectory:
    def __init__(self, db: Session):
        self.db = db

    def get_student(self, student_id: int) -> Optional[Student]:
        return self.db.get(Student, student_id)

    def get_students_by_class(self, class_id: int) -> List[Student]:
        return list(
            self.db.execute(
                select(Student).where(Student.class_id == class_id).order_by(Student.id)
            ).scalars().all()
        )

    def get_all_students(self) -> List[Student]:
        return list(self.db.execute(select(Student).order_by(Student.id)).scalars().all())


class ClassDirectory:
    def __init__(self, db: Session):
        self.db = db

    def class_exists(self, class_id: int) -> bool:
        return bool(self.db.execute(select(exists().where(SchoolClass.id == class_id))).scalar())
