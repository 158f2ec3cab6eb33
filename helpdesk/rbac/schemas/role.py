from pydantic import BaseModel, Field

from helpdesk.core.datetime_utils import UTCDatetime
from helpdesk.rbac.permissions import PermissionMatrix


class RoleCreate(BaseModel):
    role_name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    permissions: PermissionMatrix = Field(default_factory=PermissionMatrix)
    is_unrestricted: bool = False


class RoleUpdate(BaseModel):
    role_name: str | None = Field(None, min_length=1, max_length=50)
    display_name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    permissions: PermissionMatrix | None = None
    is_unrestricted: bool | None = None
    is_active: bool | None = None


class RoleResponse(BaseModel):
    id: int
    role_name: str
    display_name: str
    description: str | None = None
    permissions: PermissionMatrix
    is_system_role: bool
    is_unrestricted: bool
    is_active: bool
    employee_count: int = 0
    created_at: UTCDatetime
    updated_at: UTCDatetime

    class Config:
        from_attributes = True


class ModuleInfo(BaseModel):
    label: str
    permissions: dict[str, str]
