import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.core import security
from helpdesk.core.exceptions import UnauthorizedError
from helpdesk.db.session import get_db
from helpdesk.employees.models.employee import Employee
from helpdesk.rbac.permissions import Module, Operation
from helpdesk.rbac.services.permission_service import PermissionService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def actor_from_payload(payload: dict) -> Actor:
    """Build an ``Actor`` from verified token claims."""
    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")

    subject = payload.get("sub")
    role = payload.get("role")
    if subject is None or not role:
        raise UnauthorizedError("Could not validate credentials")
    try:
        actor_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise UnauthorizedError("Could not validate credentials") from exc

    admission_number = payload.get("admission_number") or payload.get("admissionNumber")
    return Actor(
        id=actor_id,
        role=str(role),
        admission_number=str(admission_number) if admission_number else None,
        is_worker=bool(payload.get("is_worker", False)),
    )


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the caller from ``Authorization: Bearer <token>``."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token required")

    payload = security.decode_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedError("Invalid or expired token")

    actor = actor_from_payload(payload)

    if actor.is_worker:
        employee = db.query(Employee).filter(Employee.id == actor.id).first()
        if employee is None or not employee.is_active:
            logger.info("Rejected token for inactive or missing worker %s", actor.id)
            raise UnauthorizedError("Account is inactive")

    return actor


async def get_student_actor(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_student or not actor.admission_number:
        raise UnauthorizedError("Student authentication required")
    return actor


def require_permission(
    module: Module, operation: Operation
) -> Callable[..., Actor]:
    """Dependency factory guarding a route with one permission check."""

    def dependency(
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db),
    ) -> Actor:
        PermissionService(db).require(actor, module, operation)
        return actor

    return dependency
