import enum
import logging

from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.core.exceptions import AccessDeniedError
from helpdesk.employees.models.employee import Employee
from helpdesk.rbac.models.role import Role
from helpdesk.rbac.permissions import (
    LEGACY_UNRESTRICTED_ROLES,
    Module,
    Operation,
    PermissionMatrix,
)

logger = logging.getLogger(__name__)


def _label(value: enum.Enum | str) -> str:
    return value.value if isinstance(value, enum.Enum) else str(value)


class PermissionService:
    """Single authorization chokepoint for every helpdesk mutation.

    Resolution order for a non-student actor:

    1. Token role in ``LEGACY_UNRESTRICTED_ROLES``: everything is allowed.
    2. The active employee record's custom role, falling back to the active
       role whose ``role_name`` equals the token role. A role flagged
       ``is_unrestricted`` allows everything.
    3. The employee's ``permission_overrides`` merged over that matrix.

    Anything unresolvable is denied.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _employee_for(self, actor: Actor) -> Employee | None:
        query = self.db.query(Employee).filter(Employee.is_active == True)  # noqa: E712
        if actor.is_worker:
            query = query.filter(Employee.id == actor.id)
        else:
            query = query.filter(Employee.identity_ref == actor.id)
        employee: Employee | None = query.first()
        return employee

    def _resolve_role(self, actor: Actor, employee: Employee | None) -> Role | None:
        if employee is not None and employee.custom_role is not None:
            if employee.custom_role.is_active:
                return employee.custom_role
        role: Role | None = (
            self.db.query(Role)
            .filter(Role.role_name == actor.role, Role.is_active == True)  # noqa: E712
            .first()
        )
        return role

    def is_unrestricted(self, actor: Actor) -> bool:
        if actor.is_student:
            return False
        if actor.role in LEGACY_UNRESTRICTED_ROLES:
            return True
        role = self._resolve_role(actor, self._employee_for(actor))
        return bool(role and role.is_unrestricted)

    def resolve_matrix(self, actor: Actor) -> PermissionMatrix:
        """Effective matrix for the actor; all-false when nothing resolves."""
        if actor.is_student:
            return PermissionMatrix()
        if actor.role in LEGACY_UNRESTRICTED_ROLES:
            return PermissionMatrix.full()
        employee = self._employee_for(actor)
        role = self._resolve_role(actor, employee)
        if role is None:
            return PermissionMatrix()
        if role.is_unrestricted:
            return PermissionMatrix.full()
        overrides = employee.permission_overrides if employee is not None else None
        return role.matrix.merged(overrides)

    def evaluate(self, actor: Actor, module: Module | str, operation: Operation | str) -> bool:
        if self.is_unrestricted(actor):
            return True
        return self.resolve_matrix(actor).allows(module, operation)

    def require(self, actor: Actor, module: Module | str, operation: Operation | str) -> None:
        if self.evaluate(actor, module, operation):
            return
        logger.warning(
            "Permission denied: actor=%s role=%s module=%s operation=%s",
            actor.id,
            actor.role,
            _label(module),
            _label(operation),
        )
        raise AccessDeniedError(
            f"You do not have {_label(operation)} access to {_label(module)}",
            module=_label(module),
            operation=_label(operation),
        )
