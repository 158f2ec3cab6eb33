from helpdesk.directory.models.identity import Identity
from helpdesk.directory.models.student import Student

__all__ = ["Identity", "Student"]
