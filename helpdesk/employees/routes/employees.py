from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.auth.dependencies import get_current_actor, require_permission
from helpdesk.core.schemas import ApiResponse, success_response
from helpdesk.db.session import get_db
from helpdesk.employees.schemas.employee import (
    AvailableIdentityResponse,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ManagerCreate,
)
from helpdesk.employees.services.employee_service import EmployeeService
from helpdesk.rbac.permissions import Module, Operation

router = APIRouter()


@router.get("/employees", response_model=ApiResponse[list[EmployeeResponse]])
def list_employees(
    include_inactive: bool = Query(False),
    _actor: Actor = Depends(require_permission(Module.EMPLOYEE_MANAGEMENT, Operation.READ)),
    db: Session = Depends(get_db),
) -> ApiResponse[list[EmployeeResponse]]:
    service = EmployeeService(db)
    employees = service.list_employees(include_inactive=include_inactive)
    return success_response([service.build_response(e) for e in employees])


@router.get(
    "/employees/available-users",
    response_model=ApiResponse[list[AvailableIdentityResponse]],
)
def list_available_users(
    _actor: Actor = Depends(require_permission(Module.EMPLOYEE_MANAGEMENT, Operation.READ)),
    db: Session = Depends(get_db),
) -> ApiResponse[list[AvailableIdentityResponse]]:
    identities = EmployeeService(db).available_identities()
    return success_response([AvailableIdentityResponse.model_validate(i) for i in identities])


@router.get("/employees/{employee_id}", response_model=ApiResponse[EmployeeResponse])
def get_employee(
    employee_id: int,
    _actor: Actor = Depends(require_permission(Module.EMPLOYEE_MANAGEMENT, Operation.READ)),
    db: Session = Depends(get_db),
) -> ApiResponse[EmployeeResponse]:
    service = EmployeeService(db)
    return success_response(service.build_response(service.get_employee(employee_id)))


@router.post("/employees", response_model=ApiResponse[EmployeeResponse], status_code=201)
def create_employee(
    data: Annotated[EmployeeCreate, Body(discriminator="role")],
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[EmployeeResponse]:
    service = EmployeeService(db)
    if isinstance(data, ManagerCreate):
        employee = service.create_manager(data, actor)
    else:
        employee = service.create_worker(data, actor)
    return success_response(
        service.build_response(employee), message="Employee created successfully"
    )


@router.put("/employees/{employee_id}", response_model=ApiResponse[EmployeeResponse])
def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[EmployeeResponse]:
    service = EmployeeService(db)
    employee = service.update_employee(employee_id, data, actor)
    return success_response(
        service.build_response(employee), message="Employee updated successfully"
    )


@router.delete("/employees/{employee_id}", response_model=ApiResponse[None])
def delete_employee(
    employee_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[None]:
    EmployeeService(db).deactivate(employee_id, actor)
    return success_response(None, message="Employee deactivated successfully")
