import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.categories.models.category import Category
from helpdesk.core import security
from helpdesk.core.constants import MANAGER_IDENTITY_ROLE
from helpdesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from helpdesk.db.session import commit_or_rollback
from helpdesk.directory.models.identity import Identity
from helpdesk.directory.services.identity_store import IdentityStore
from helpdesk.employees.models.employee import Employee, Manager, Worker
from helpdesk.employees.schemas.employee import (
    EmployeeResponse,
    EmployeeUpdate,
    ManagerCreate,
    PermissionOverrides,
    WorkerCreate,
)
from helpdesk.rbac.models.role import Role
from helpdesk.rbac.permissions import LEGACY_UNRESTRICTED_ROLES, Module, Operation
from helpdesk.rbac.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


def _overrides_to_json(overrides: PermissionOverrides | None) -> dict[str, Any] | None:
    if not overrides:
        return None
    return {
        module.value: {operation.value: bool(granted) for operation, granted in grants.items()}
        for module, grants in overrides.items()
    }


def _username_taken() -> ConflictError:
    return ConflictError(
        "Username already exists", resource="employee", error_code="USERNAME_TAKEN"
    )


class EmployeeService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.identities = IdentityStore(db)
        self.permissions = PermissionService(db)

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def get_employee(self, employee_id: int) -> Employee:
        employee: Employee | None = (
            self.db.query(Employee).filter(Employee.id == employee_id).first()
        )
        if not employee:
            raise NotFoundError(
                "Employee not found", resource="employee", error_code="EMPLOYEE_NOT_FOUND"
            )
        return employee

    def list_employees(self, include_inactive: bool = False) -> list[Employee]:
        query = self.db.query(Employee)
        if not include_inactive:
            query = query.filter(Employee.is_active == True)  # noqa: E712
        return query.order_by(Employee.created_at.desc(), Employee.id.desc()).all()

    def available_identities(self) -> list[Identity]:
        wrapped = [
            ref
            for (ref,) in self.db.query(Employee.identity_ref)
            .filter(Employee.is_active == True, Employee.identity_ref.isnot(None))  # noqa: E712
            .all()
        ]
        return self.identities.list_available(wrapped)

    # ------------------------------------------------------------------
    # validation helpers
    # ------------------------------------------------------------------

    def _validate_role(self, custom_role_id: int | None) -> None:
        if custom_role_id is None:
            return
        role = (
            self.db.query(Role)
            .filter(Role.id == custom_role_id, Role.is_active == True)  # noqa: E712
            .first()
        )
        if role is None:
            raise NotFoundError("Role not found", resource="role", error_code="ROLE_NOT_FOUND")

    def _validate_scope(self, category_ids: list[int], sub_category_ids: list[int]) -> None:
        if category_ids:
            found = {
                cid
                for (cid,) in self.db.query(Category.id)
                .filter(Category.id.in_(category_ids), Category.parent_id.is_(None))
                .all()
            }
            if set(category_ids) - found:
                raise ValidationError(
                    "Unknown main category in scope",
                    field="category_ids",
                    error_code="INVALID_CATEGORY",
                )
        if sub_category_ids:
            found = {
                cid
                for (cid,) in self.db.query(Category.id)
                .filter(Category.id.in_(sub_category_ids), Category.parent_id.isnot(None))
                .all()
            }
            if set(sub_category_ids) - found:
                raise ValidationError(
                    "Unknown sub-category in scope",
                    field="sub_category_ids",
                    error_code="INVALID_SUB_CATEGORY",
                )

    def _ensure_identity_free(self, identity_ref: int, exclude_id: int | None = None) -> None:
        query = self.db.query(Employee.id).filter(
            Employee.identity_ref == identity_ref,
            Employee.is_active == True,  # noqa: E712
        )
        if exclude_id is not None:
            query = query.filter(Employee.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(
                "This user is already assigned as an employee",
                resource="employee",
                error_code="ALREADY_ASSIGNED",
            )

    def _username_exists(self, username: str) -> bool:
        employee_match = (
            self.db.query(Employee.id)
            .filter(func.lower(Employee.username) == username.lower())
            .first()
        )
        return employee_match is not None or self.identities.username_exists(username)

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    def create_manager(self, data: ManagerCreate, actor: Actor) -> Manager:
        self.permissions.require(actor, Module.EMPLOYEE_MANAGEMENT, Operation.WRITE)
        identity = self.identities.get(data.identity_ref)
        if identity is None or not identity.is_active:
            raise NotFoundError(
                "User not found in the identity store",
                resource="identity",
                error_code="IDENTITY_NOT_FOUND",
            )
        self._ensure_identity_free(identity.id)
        self._validate_role(data.custom_role_id)
        category_ids = list(dict.fromkeys(data.category_ids))
        sub_category_ids = list(dict.fromkeys(data.sub_category_ids))
        self._validate_scope(category_ids, sub_category_ids)

        manager = Manager(
            identity_ref=identity.id,
            custom_role_id=data.custom_role_id,
            assigned_category_ids=category_ids,
            assigned_sub_category_ids=sub_category_ids,
            permission_overrides=_overrides_to_json(data.permission_overrides),
            is_active=True,
            created_by_ref=actor.id,
        )
        self.db.add(manager)
        if identity.role not in LEGACY_UNRESTRICTED_ROLES:
            self.identities.sync_role(identity, MANAGER_IDENTITY_ROLE)

        commit_or_rollback(self.db, "create_manager")
        self.db.refresh(manager)
        logger.info("Employee created: manager %s wrapping identity %s", manager.id, identity.id)
        return manager

    def create_worker(self, data: WorkerCreate, actor: Actor) -> Worker:
        self.permissions.require(actor, Module.EMPLOYEE_MANAGEMENT, Operation.WRITE)
        name = data.name.strip()
        username = data.username.strip()
        if not name:
            raise ValidationError("Worker name is required", field="name", error_code="EMPTY_FIELD")
        if self._username_exists(username):
            raise _username_taken()
        self._validate_role(data.custom_role_id)

        worker = Worker(
            name=name,
            username=username,
            email=str(data.email) if data.email else None,
            phone=data.phone,
            password_hash=security.get_password_hash(data.password),
            custom_role_id=data.custom_role_id,
            assigned_category_ids=[],
            assigned_sub_category_ids=[],
            permission_overrides=_overrides_to_json(data.permission_overrides),
            is_active=True,
            created_by_ref=actor.id,
        )
        self.db.add(worker)
        commit_or_rollback(self.db, "create_worker", on_integrity_error=_username_taken())
        self.db.refresh(worker)
        logger.info("Employee created: worker %s (%s)", worker.id, worker.username)
        return worker

    def update_employee(self, employee_id: int, data: EmployeeUpdate, actor: Actor) -> Employee:
        self.permissions.require(actor, Module.EMPLOYEE_MANAGEMENT, Operation.UPDATE)
        employee = self.get_employee(employee_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update", error_code="NO_FIELDS")

        scope_fields = {"category_ids", "sub_category_ids"} & changes.keys()
        profile_fields = {"name", "phone", "email", "password"} & changes.keys()
        if scope_fields and not isinstance(employee, Manager):
            raise ValidationError(
                "Only managers are scoped to categories", field=sorted(scope_fields)[0]
            )
        if profile_fields and not isinstance(employee, Worker):
            raise ValidationError(
                "Profile fields belong to the identity store for managers",
                field=sorted(profile_fields)[0],
            )

        if scope_fields:
            category_ids = list(dict.fromkeys(data.category_ids or []))
            sub_category_ids = list(dict.fromkeys(data.sub_category_ids or []))
            self._validate_scope(category_ids, sub_category_ids)
            if "category_ids" in changes:
                employee.assigned_category_ids = category_ids
            if "sub_category_ids" in changes:
                employee.assigned_sub_category_ids = sub_category_ids

        if "custom_role_id" in changes:
            self._validate_role(data.custom_role_id)
            employee.custom_role_id = data.custom_role_id
        if "permission_overrides" in changes:
            employee.permission_overrides = _overrides_to_json(data.permission_overrides)

        if "is_active" in changes and data.is_active is not None:
            if data.is_active and not employee.is_active and employee.identity_ref is not None:
                self._ensure_identity_free(employee.identity_ref, exclude_id=employee.id)
            employee.is_active = data.is_active

        if isinstance(employee, Worker):
            if "name" in changes:
                name = (data.name or "").strip()
                if not name:
                    raise ValidationError(
                        "Worker name is required", field="name", error_code="EMPTY_FIELD"
                    )
                employee.name = name
            if "phone" in changes:
                employee.phone = data.phone
            if "email" in changes:
                employee.email = str(data.email) if data.email else None
            if data.password:
                employee.password_hash = security.get_password_hash(data.password)

        commit_or_rollback(self.db, "update_employee")
        self.db.refresh(employee)
        logger.info("Employee updated: %s fields=%s", employee.id, sorted(changes))
        return employee

    def deactivate(self, employee_id: int, actor: Actor) -> Employee:
        self.permissions.require(actor, Module.EMPLOYEE_MANAGEMENT, Operation.DELETE)
        employee = self.get_employee(employee_id)
        employee.is_active = False
        commit_or_rollback(self.db, "deactivate_employee")
        self.db.refresh(employee)
        logger.info("Employee deactivated: %s by actor %s", employee.id, actor.id)
        return employee

    # ------------------------------------------------------------------
    # responses
    # ------------------------------------------------------------------

    @staticmethod
    def build_response(employee: Employee) -> EmployeeResponse:
        email = employee.email
        phone = employee.phone
        if isinstance(employee, Manager) and employee.identity is not None:
            email = employee.identity.email
            phone = employee.identity.phone
        return EmployeeResponse(
            id=employee.id,
            role=employee.role,
            identity_ref=employee.identity_ref,
            display_name=employee.display_name,
            username=employee.account_username,
            email=email,
            phone=phone,
            custom_role_id=employee.custom_role_id,
            custom_role_name=employee.custom_role.display_name if employee.custom_role else None,
            assigned_category_ids=employee.assigned_category_ids or [],
            assigned_sub_category_ids=employee.assigned_sub_category_ids or [],
            permission_overrides=employee.permission_overrides,
            is_active=employee.is_active,
            created_at=employee.created_at,
            updated_at=employee.updated_at,
        )
