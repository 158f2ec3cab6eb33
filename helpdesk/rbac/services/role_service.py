import logging
import re
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.core.exceptions import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from helpdesk.core.repository import BaseRepository
from helpdesk.db.session import commit_or_rollback
from helpdesk.employees.models.employee import Employee
from helpdesk.rbac.models.role import Role
from helpdesk.rbac.permissions import (
    MODULE_CATALOG,
    SYSTEM_ROLES,
    Module,
    Operation,
    PermissionMatrix,
)
from helpdesk.rbac.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from helpdesk.rbac.services.permission_service import PermissionService

logger = logging.getLogger(__name__)

ROLE_NAME_PATTERN = re.compile(r"^[a-z_]+$")


class RoleRepository(BaseRepository[Role]):
    def __init__(self, db: Session):
        super().__init__(db, Role)

    def find_by_name(self, role_name: str, exclude_id: int | None = None) -> Role | None:
        query = self.db.query(Role).filter(Role.role_name == role_name)
        if exclude_id is not None:
            query = query.filter(Role.id != exclude_id)
        role: Role | None = query.first()
        return role


class RoleService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.roles = RoleRepository(db)
        self.permissions = PermissionService(db)

    def _validate_name(self, role_name: str, exclude_id: int | None = None) -> None:
        if not ROLE_NAME_PATTERN.match(role_name):
            raise ValidationError(
                "Role name must be lowercase with underscores only",
                field="role_name",
                error_code="INVALID_FORMAT",
            )
        if self.roles.find_by_name(role_name, exclude_id=exclude_id):
            raise ConflictError(
                f"Role '{role_name}' already exists",
                resource="role",
                error_code="DUPLICATE_ROLE",
            )

    def _require_unrestricted(self, actor: Actor) -> None:
        if not self.permissions.is_unrestricted(actor):
            raise AccessDeniedError("Only unrestricted roles may grant unrestricted access")

    def _employee_counts(self) -> dict[int, int]:
        rows = (
            self.db.query(Employee.custom_role_id, func.count(Employee.id))
            .filter(Employee.is_active == True, Employee.custom_role_id.isnot(None))  # noqa: E712
            .group_by(Employee.custom_role_id)
            .all()
        )
        return {role_id: count for role_id, count in rows}

    def list_roles(self, include_inactive: bool = False) -> list[RoleResponse]:
        query = self.db.query(Role)
        if not include_inactive:
            query = query.filter(Role.is_active == True)  # noqa: E712
        roles = query.order_by(Role.is_system_role.desc(), Role.display_name.asc()).all()
        counts = self._employee_counts()
        return [self.build_response(role, counts.get(role.id, 0)) for role in roles]

    def get_role(self, role_id: int) -> Role:
        role = self.roles.get_by_id(role_id)
        if not role:
            raise NotFoundError("Role not found", resource="role", error_code="ROLE_NOT_FOUND")
        return role

    def create_role(self, actor: Actor, data: RoleCreate) -> Role:
        self.permissions.require(actor, Module.TICKET_SETTINGS, Operation.WRITE)
        self._validate_name(data.role_name)
        if data.is_unrestricted:
            self._require_unrestricted(actor)

        role = Role(
            role_name=data.role_name,
            display_name=data.display_name.strip(),
            description=data.description,
            permissions=data.permissions.model_dump(),
            is_system_role=False,
            is_unrestricted=data.is_unrestricted,
            is_active=True,
            created_by_ref=None if actor.is_worker else actor.id,
        )
        self.db.add(role)
        commit_or_rollback(
            self.db,
            "create_role",
            on_integrity_error=ConflictError(
                f"Role '{data.role_name}' already exists",
                resource="role",
                error_code="DUPLICATE_ROLE",
            ),
        )
        self.db.refresh(role)
        logger.info("Role created: %s (id=%s) by actor %s", role.role_name, role.id, actor.id)
        return role

    def update_role(self, role_id: int, data: RoleUpdate, actor: Actor) -> Role:
        self.permissions.require(actor, Module.TICKET_SETTINGS, Operation.UPDATE)
        role = self.get_role(role_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update", error_code="NO_FIELDS")

        if "role_name" in changes and changes["role_name"] != role.role_name:
            self._validate_name(changes["role_name"], exclude_id=role.id)
        if changes.get("is_unrestricted") and not role.is_unrestricted:
            self._require_unrestricted(actor)

        for field, value in changes.items():
            if field == "permissions":
                if data.permissions is not None:
                    role.permissions = data.permissions.model_dump()
            elif value is not None or field == "description":
                setattr(role, field, value)

        commit_or_rollback(self.db, "update_role")
        self.db.refresh(role)
        logger.info("Role updated: %s (id=%s) fields=%s", role.role_name, role.id, sorted(changes))
        return role

    def delete_role(self, role_id: int, actor: Actor) -> None:
        self.permissions.require(actor, Module.TICKET_SETTINGS, Operation.DELETE)
        role = self.get_role(role_id)
        in_use = self._employee_counts().get(role.id, 0)
        if in_use:
            raise ConflictError(
                f"Cannot delete role. {in_use} employee(s) are assigned to this role",
                resource="role",
                error_code="ROLE_IN_USE",
            )
        role.is_active = False
        commit_or_rollback(self.db, "delete_role")
        logger.info("Role deactivated: %s (id=%s) by actor %s", role.role_name, role.id, actor.id)

    def ensure_system_roles(self) -> int:
        """Insert missing seed roles. Existing rows are left as they are.

        Returns:
            Number of roles created.
        """
        created = 0
        for definition in SYSTEM_ROLES:
            if self.roles.find_by_name(definition["role_name"]):
                continue
            self.db.add(
                Role(
                    role_name=definition["role_name"],
                    display_name=definition["display_name"],
                    description=definition["description"],
                    permissions=PermissionMatrix.model_validate(
                        definition["permissions"]
                    ).model_dump(),
                    is_system_role=True,
                    is_unrestricted=definition["is_unrestricted"],
                    is_active=True,
                )
            )
            created += 1
        if created:
            commit_or_rollback(self.db, "ensure_system_roles")
            logger.info("Seeded %d system role(s)", created)
        return created

    @staticmethod
    def module_catalog() -> dict[str, dict[str, Any]]:
        return MODULE_CATALOG

    def build_response(self, role: Role, employee_count: int | None = None) -> RoleResponse:
        if employee_count is None:
            employee_count = self._employee_counts().get(role.id, 0)
        return RoleResponse(
            id=role.id,
            role_name=role.role_name,
            display_name=role.display_name,
            description=role.description,
            permissions=role.matrix,
            is_system_role=role.is_system_role,
            is_unrestricted=role.is_unrestricted,
            is_active=role.is_active,
            employee_count=employee_count,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )
