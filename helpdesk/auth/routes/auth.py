import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from helpdesk.auth.schemas.auth import WorkerLoginRequest, WorkerLoginResponse
from helpdesk.core import security
from helpdesk.core.config import settings
from helpdesk.core.exceptions import UnauthorizedError
from helpdesk.core.rate_limit import limiter
from helpdesk.core.schemas import ApiResponse, success_response
from helpdesk.db.session import get_db
from helpdesk.employees.models.employee import EmployeeKind, Worker
from helpdesk.employees.services.employee_service import EmployeeService

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/auth/worker-login", response_model=ApiResponse[WorkerLoginResponse])
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def worker_login(
    request: Request,
    credentials: WorkerLoginRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[WorkerLoginResponse]:
    worker: Worker | None = (
        db.query(Worker)
        .filter(func.lower(Worker.username) == credentials.username.strip().lower())
        .first()
    )

    if not worker or not worker.password_hash:
        logger.info("Worker login failed for unknown username")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not security.verify_password(credentials.password, worker.password_hash):
        logger.info("Worker login failed for worker %s", worker.id)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not worker.is_active:
        logger.info("Worker login rejected for inactive worker %s", worker.id)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    token = security.create_access_token(
        {"sub": str(worker.id), "role": EmployeeKind.WORKER.value, "is_worker": True}
    )
    logger.info("Worker %s logged in", worker.id)
    return success_response(
        WorkerLoginResponse(
            access_token=token,
            employee=EmployeeService.build_response(worker),
        ),
        message="Login successful",
    )
