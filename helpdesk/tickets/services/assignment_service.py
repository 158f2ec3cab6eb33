import logging

from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.core.exceptions import NotFoundError, ValidationError
from helpdesk.db.session import commit_or_rollback
from helpdesk.employees.models.employee import Employee
from helpdesk.rbac.permissions import Module, Operation
from helpdesk.rbac.services.permission_service import PermissionService
from helpdesk.tickets.models.assignment import Assignment
from helpdesk.tickets.models.ticket import Ticket, TicketStatus
from helpdesk.tickets.repository import TicketRepository

logger = logging.getLogger(__name__)

AUTO_ASSIGN_NOTE = "assigned to staff"


class AssignmentService:
    """Replaces a ticket's active assignee set in one transaction."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.tickets = TicketRepository(db)

    def _resolve_employees(self, employee_ids: list[int], ticket: Ticket) -> list[Employee]:
        found = {
            e.id: e
            for e in self.db.query(Employee)
            .filter(Employee.id.in_(employee_ids), Employee.is_active == True)  # noqa: E712
            .all()
        }
        missing = [eid for eid in employee_ids if eid not in found]
        if missing:
            raise NotFoundError(
                f"One or more assigned employees not found: {missing}",
                resource="employee",
                error_code="UNKNOWN_EMPLOYEE",
            )

        employees = [found[eid] for eid in employee_ids]
        out_of_scope = [e.id for e in employees if not e.can_handle(ticket)]
        if out_of_scope:
            raise ValidationError(
                f"Employees {out_of_scope} are not assigned to this ticket's category",
                field="employee_ids",
                error_code="EMPLOYEE_OUT_OF_SCOPE",
            )
        return employees

    def assign(
        self,
        ticket_id: int,
        employee_ids: list[int],
        actor: Actor,
        notes: str | None = None,
    ) -> list[Assignment]:
        PermissionService(self.db).require(actor, Module.TICKET_MANAGEMENT, Operation.WRITE)
        if not employee_ids:
            raise ValidationError(
                "At least one employee must be assigned",
                field="employee_ids",
                error_code="EMPTY_ASSIGNMENT",
            )
        unique_ids = list(dict.fromkeys(employee_ids))

        ticket = self.tickets.get_or_404(ticket_id, for_update=True)
        employees = self._resolve_employees(unique_ids, ticket)

        for previous in self.tickets.active_assignments(ticket.id):
            previous.is_active = False

        assignments = [
            Assignment(
                ticket_id=ticket.id,
                employee_ref=employee.id,
                assigned_by_ref=actor.id,
                notes=notes,
                is_active=True,
            )
            for employee in employees
        ]
        self.db.add_all(assignments)

        if ticket.status == TicketStatus.PENDING.value:
            self.tickets.record_status_change(
                ticket, TicketStatus.APPROACHING.value, actor.id, AUTO_ASSIGN_NOTE
            )

        commit_or_rollback(self.db, "assign_ticket")
        for assignment in assignments:
            self.db.refresh(assignment)
        self.db.refresh(ticket)
        logger.info(
            "Ticket %s assigned to employees %s by actor %s",
            ticket.ticket_number,
            unique_ids,
            actor.id,
        )
        return assignments

    def active_assignments(self, ticket_id: int) -> list[Assignment]:
        self.tickets.get_or_404(ticket_id)
        return self.tickets.active_assignments(ticket_id)
