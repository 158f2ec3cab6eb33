from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.auth.dependencies import get_current_actor
from helpdesk.core.schemas import ApiResponse, success_response
from helpdesk.db.session import get_db
from helpdesk.rbac.schemas.role import ModuleInfo, RoleCreate, RoleResponse, RoleUpdate
from helpdesk.rbac.services.role_service import RoleService

router = APIRouter()


@router.get("/roles", response_model=ApiResponse[list[RoleResponse]])
def list_roles(
    include_inactive: bool = Query(False),
    _actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[list[RoleResponse]]:
    service = RoleService(db)
    return success_response(service.list_roles(include_inactive=include_inactive))


@router.get("/roles/modules", response_model=ApiResponse[dict[str, ModuleInfo]])
def get_modules(
    _actor: Actor = Depends(get_current_actor),
) -> ApiResponse[dict[str, Any]]:
    return success_response(RoleService.module_catalog())


@router.get("/roles/{role_id}", response_model=ApiResponse[RoleResponse])
def get_role(
    role_id: int,
    _actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[RoleResponse]:
    service = RoleService(db)
    return success_response(service.build_response(service.get_role(role_id)))


@router.post("/roles", response_model=ApiResponse[RoleResponse], status_code=201)
def create_role(
    data: RoleCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[RoleResponse]:
    service = RoleService(db)
    role = service.create_role(actor, data)
    return success_response(service.build_response(role, 0), message="Role created successfully")


@router.put("/roles/{role_id}", response_model=ApiResponse[RoleResponse])
def update_role(
    role_id: int,
    data: RoleUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[RoleResponse]:
    service = RoleService(db)
    role = service.update_role(role_id, data, actor)
    return success_response(service.build_response(role), message="Role updated successfully")


@router.delete("/roles/{role_id}", response_model=ApiResponse[None])
def delete_role(
    role_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[None]:
    RoleService(db).delete_role(role_id, actor)
    return success_response(None, message="Role deleted successfully")
