from sqlalchemy.orm import Session

from helpdesk.directory.models.student import Student


class StudentDirectory:
    """Admission-number to student lookup backed by the platform's students table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def resolve(self, admission_number: str | None) -> Student | None:
        if not admission_number:
            return None
        student: Student | None = (
            self.db.query(Student).filter(Student.admission_number == admission_number).first()
        )
        return student

    def get(self, student_id: int) -> Student | None:
        student: Student | None = self.db.query(Student).filter(Student.id == student_id).first()
        return student
