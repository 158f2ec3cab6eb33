from dataclasses import dataclass

from helpdesk.core.constants import STUDENT_ROLE


@dataclass(frozen=True)
class Actor:
    """Caller identity decoded from the bearer token.

    ``id`` is a student id for students, an identity-store id for platform
    staff and an employee id for standalone workers (``is_worker``).
    """

    id: int
    role: str
    admission_number: str | None = None
    is_worker: bool = False

    @property
    def is_student(self) -> bool:
        """Any token carrying an admission number acts as a student.

        This holds whatever the role claim says, so such a token never gets
        the legacy admin bypass or any staff permission.
        """
        return self.role == STUDENT_ROLE or bool(self.admission_number)
