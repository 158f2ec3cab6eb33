"""
Database base module - imports all models for Alembic migration detection.

Importing this module registers every mapped class on ``Base.metadata`` and
makes string-based relationship targets resolvable.
"""

from helpdesk.categories.models.category import Category
from helpdesk.db.session import Base
from helpdesk.directory.models.identity import Identity
from helpdesk.directory.models.student import Student
from helpdesk.employees.models.employee import Employee, Manager, Worker
from helpdesk.rbac.models.role import Role
from helpdesk.tickets.models.assignment import Assignment
from helpdesk.tickets.models.comment import Comment
from helpdesk.tickets.models.feedback import Feedback
from helpdesk.tickets.models.status_history import StatusHistoryEntry
from helpdesk.tickets.models.ticket import Ticket

__all__ = [
    "Base",
    "Category",
    "Identity",
    "Student",
    "Employee",
    "Manager",
    "Worker",
    "Role",
    "Assignment",
    "Comment",
    "Feedback",
    "StatusHistoryEntry",
    "Ticket",
]
