from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base


class Student(Base):
    """
    Student record owned by the student-management platform.

    The helpdesk only reads this table to turn an admission number into a
    student identity; profiles are maintained elsewhere.
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(primary_key=True)
    admission_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    student_name: Mapped[str] = mapped_column(String(255))
    student_mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    student_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=utc_now)

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, admission_number={self.admission_number})>"
