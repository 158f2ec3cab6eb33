"""Permission matrix types and the static module catalog.

A role's permissions are a ``PermissionMatrix``: one ``OperationGrant`` per
recognized module, every operation defaulting to ``False``. Matrices are
validated when they enter the system (request bodies, stored JSON) so the
engine never has to fill gaps while evaluating.
"""

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class Module(str, enum.Enum):
    TICKET_DASHBOARD = "ticket_dashboard"
    TICKET_MANAGEMENT = "ticket_management"
    EMPLOYEE_MANAGEMENT = "employee_management"
    CATEGORY_MANAGEMENT = "category_management"
    TICKET_REPORTS = "ticket_reports"
    TICKET_SETTINGS = "ticket_settings"


class Operation(str, enum.Enum):
    READ = "read"
    WRITE = "write"
    UPDATE = "update"
    DELETE = "delete"


# Role names that bypass the matrix. Seeded roles with these names carry
# ``is_unrestricted=True``; tokens with these roles pass even without a role row.
LEGACY_UNRESTRICTED_ROLES: frozenset[str] = frozenset({"super_admin", "admin"})


class OperationGrant(BaseModel):
    model_config = ConfigDict(extra="forbid")

    read: bool = False
    write: bool = False
    update: bool = False
    delete: bool = False

    def allows(self, operation: Operation) -> bool:
        return bool(getattr(self, operation.value))


class PermissionMatrix(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ticket_dashboard: OperationGrant = OperationGrant()
    ticket_management: OperationGrant = OperationGrant()
    employee_management: OperationGrant = OperationGrant()
    category_management: OperationGrant = OperationGrant()
    ticket_reports: OperationGrant = OperationGrant()
    ticket_settings: OperationGrant = OperationGrant()

    def allows(self, module: Module | str, operation: Operation | str) -> bool:
        try:
            module = Module(module)
            operation = Operation(operation)
        except ValueError:
            return False
        grant: OperationGrant = getattr(self, module.value)
        return grant.allows(operation)

    def merged(self, overrides: dict[str, Any] | None) -> "PermissionMatrix":
        """Apply per-employee overrides (module -> partial grants) on top of this matrix."""
        if not overrides:
            return self
        data = self.model_dump()
        for module_name, grants in overrides.items():
            if module_name not in data or not isinstance(grants, dict):
                continue
            for op_name, value in grants.items():
                if op_name in data[module_name]:
                    data[module_name][op_name] = bool(value)
        return PermissionMatrix.model_validate(data)

    @classmethod
    def from_stored(cls, raw: dict[str, Any] | None) -> "PermissionMatrix":
        """Load a stored matrix, ignoring keys that are no longer recognized."""
        if not raw:
            return cls()
        known = {m.value for m in Module}
        ops = {o.value for o in Operation}
        cleaned = {
            module: {op: bool(v) for op, v in grants.items() if op in ops}
            for module, grants in raw.items()
            if module in known and isinstance(grants, dict)
        }
        return cls.model_validate(cleaned)

    @classmethod
    def full(cls) -> "PermissionMatrix":
        grant = {op.value: True for op in Operation}
        return cls.model_validate({m.value: grant for m in Module})


MODULE_CATALOG: dict[str, dict[str, Any]] = {
    Module.TICKET_DASHBOARD.value: {
        "label": "Dashboard",
        "permissions": {"read": "View Dashboard"},
    },
    Module.TICKET_MANAGEMENT.value: {
        "label": "Ticket Management",
        "permissions": {
            "read": "View Tickets",
            "write": "Create Tickets",
            "update": "Update Tickets (Status, Assignments)",
            "delete": "Delete Tickets",
        },
    },
    Module.EMPLOYEE_MANAGEMENT.value: {
        "label": "Employee Management",
        "permissions": {
            "read": "View Employees",
            "write": "Create Employees",
            "update": "Update Employee Details",
            "delete": "Remove Employees",
        },
    },
    Module.CATEGORY_MANAGEMENT.value: {
        "label": "Category Management",
        "permissions": {
            "read": "View Categories",
            "write": "Create Categories",
            "update": "Update Categories",
            "delete": "Delete Categories",
        },
    },
    Module.TICKET_REPORTS.value: {
        "label": "Reports & Analytics",
        "permissions": {
            "read": "View Reports",
            "write": "Generate Reports",
            "update": "Customize Reports",
            "delete": "Delete Reports",
        },
    },
    Module.TICKET_SETTINGS.value: {
        "label": "System Settings",
        "permissions": {
            "read": "View Settings",
            "write": "Create Settings",
            "update": "Update Settings",
            "delete": "Delete Settings",
        },
    },
}


def _grant(read: bool = False, write: bool = False, update: bool = False, delete: bool = False):
    return {"read": read, "write": write, "update": update, "delete": delete}


_MANAGER_PERMISSIONS = {
    "ticket_dashboard": _grant(read=True),
    "ticket_management": _grant(read=True, write=True, update=True),
    "employee_management": _grant(read=True, write=True),
    "category_management": _grant(read=True),
    "ticket_reports": _grant(read=True),
}

SYSTEM_ROLES: list[dict[str, Any]] = [
    {
        "role_name": "super_admin",
        "display_name": "Super Administrator",
        "description": "Full system access with all permissions",
        "permissions": PermissionMatrix.full().model_dump(),
        "is_unrestricted": True,
    },
    {
        "role_name": "admin",
        "display_name": "Administrator",
        "description": "Administrative access with most permissions",
        "permissions": {
            "ticket_dashboard": _grant(read=True),
            "ticket_management": _grant(read=True, write=True, update=True, delete=True),
            "employee_management": _grant(read=True, write=True, update=True),
            "category_management": _grant(read=True, write=True, update=True),
            "ticket_reports": _grant(read=True, write=True),
            "ticket_settings": _grant(read=True),
        },
        "is_unrestricted": True,
    },
    {
        "role_name": "manager",
        "display_name": "Ticket Manager",
        "description": "Can manage tickets and assign workers",
        "permissions": _MANAGER_PERMISSIONS,
        "is_unrestricted": False,
    },
    {
        "role_name": "staff",
        "display_name": "Staff Member",
        "description": "Staff with ticket management capabilities",
        "permissions": _MANAGER_PERMISSIONS,
        "is_unrestricted": False,
    },
    {
        "role_name": "worker",
        "display_name": "Ticket Worker",
        "description": "Can view and update assigned tickets",
        "permissions": {
            "ticket_dashboard": _grant(read=True),
            "ticket_management": _grant(read=True, update=True),
            "category_management": _grant(read=True),
        },
        "is_unrestricted": False,
    },
]
