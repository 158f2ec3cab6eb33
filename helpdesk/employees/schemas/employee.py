from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field

from helpdesk.core.datetime_utils import UTCDatetime
from helpdesk.rbac.permissions import Module, Operation

PermissionOverrides = dict[Module, dict[Operation, bool]]


class ManagerCreate(BaseModel):
    role: Literal["manager"]
    identity_ref: int
    category_ids: list[int] = Field(default_factory=list)
    sub_category_ids: list[int] = Field(default_factory=list)
    custom_role_id: int | None = None
    permission_overrides: PermissionOverrides | None = None


class WorkerCreate(BaseModel):
    role: Literal["worker"]
    name: str = Field(..., max_length=255)
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=128)
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    custom_role_id: int | None = None
    permission_overrides: PermissionOverrides | None = None


EmployeeCreate = ManagerCreate | WorkerCreate


class EmployeeUpdate(BaseModel):
    category_ids: list[int] | None = None
    sub_category_ids: list[int] | None = None
    custom_role_id: int | None = None
    permission_overrides: PermissionOverrides | None = None
    is_active: bool | None = None
    # worker profile
    name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=6, max_length=128)


class EmployeeResponse(BaseModel):
    id: int
    role: str
    identity_ref: int | None = None
    display_name: str
    username: str | None = None
    email: str | None = None
    phone: str | None = None
    custom_role_id: int | None = None
    custom_role_name: str | None = None
    assigned_category_ids: list[int] = []
    assigned_sub_category_ids: list[int] = []
    permission_overrides: dict[str, Any] | None = None
    is_active: bool
    created_at: UTCDatetime
    updated_at: UTCDatetime


class AvailableIdentityResponse(BaseModel):
    id: int
    name: str
    username: str
    email: str | None = None
    role: str

    class Config:
        from_attributes = True
