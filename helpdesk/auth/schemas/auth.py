from pydantic import BaseModel, Field

from helpdesk.employees.schemas.employee import EmployeeResponse


class WorkerLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class WorkerLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    employee: EmployeeResponse
