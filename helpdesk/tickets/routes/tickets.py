from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.auth.dependencies import get_current_actor, get_student_actor
from helpdesk.core.config import settings
from helpdesk.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from helpdesk.core.rate_limit import limiter
from helpdesk.core.schemas import (
    ApiResponse,
    PaginatedResponse,
    paginated_response,
    success_response,
)
from helpdesk.db.session import get_db
from helpdesk.tickets.schemas.ticket import (
    AssignmentResponse,
    CommentCreate,
    CommentResponse,
    FeedbackCreate,
    FeedbackResponse,
    TicketAssignRequest,
    TicketCreate,
    TicketDetailResponse,
    TicketListItem,
    TicketStatsResponse,
    TicketStatusUpdate,
)
from helpdesk.tickets.services.assignment_service import AssignmentService
from helpdesk.tickets.services.comment_service import CommentService
from helpdesk.tickets.services.feedback_service import FeedbackService
from helpdesk.tickets.services.ticket_service import TicketService

router = APIRouter()


@router.post("/tickets", response_model=ApiResponse[TicketDetailResponse], status_code=201)
@limiter.limit(settings.TICKET_CREATE_RATE_LIMIT)
def create_ticket(
    request: Request,
    data: TicketCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[TicketDetailResponse]:
    service = TicketService(db)
    ticket = service.create_ticket(actor, data)
    return success_response(
        service.build_detail_response(ticket, actor), message="Ticket created successfully"
    )


@router.get("/tickets", response_model=PaginatedResponse[TicketListItem])
def list_tickets(
    status: str | None = None,
    category_id: int | None = None,
    assigned_to: int | None = None,
    student_id: int | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> PaginatedResponse[TicketListItem]:
    service = TicketService(db)
    tickets, total = service.list_tickets(
        actor,
        status_filter=status,
        category_id=category_id,
        assigned_to=assigned_to,
        student_id=student_id,
        page=page,
        limit=limit,
    )
    return paginated_response([service.build_list_item(t) for t in tickets], total, page, limit)


@router.get("/tickets/stats", response_model=ApiResponse[TicketStatsResponse])
def get_ticket_stats(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[TicketStatsResponse]:
    return success_response(TicketService(db).ticket_stats(actor))


@router.get("/tickets/{ticket_id}", response_model=ApiResponse[TicketDetailResponse])
def get_ticket(
    ticket_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[TicketDetailResponse]:
    service = TicketService(db)
    ticket = service.get_ticket(ticket_id, actor)
    return success_response(service.build_detail_response(ticket, actor))


@router.post("/tickets/{ticket_id}/assign", response_model=ApiResponse[list[AssignmentResponse]])
def assign_ticket(
    ticket_id: int,
    data: TicketAssignRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[list[AssignmentResponse]]:
    assignments = AssignmentService(db).assign(ticket_id, data.employee_ids, actor, data.notes)
    return success_response(
        [AssignmentResponse.from_assignment(a) for a in assignments],
        message="Ticket assigned successfully",
    )


@router.put("/tickets/{ticket_id}/status", response_model=ApiResponse[TicketDetailResponse])
def change_ticket_status(
    ticket_id: int,
    data: TicketStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[TicketDetailResponse]:
    service = TicketService(db)
    ticket = service.change_status(ticket_id, data.status, actor, data.notes)
    return success_response(
        service.build_detail_response(ticket, actor),
        message="Ticket status updated successfully",
    )


@router.post(
    "/tickets/{ticket_id}/comments",
    response_model=ApiResponse[CommentResponse],
    status_code=201,
)
def add_comment(
    ticket_id: int,
    data: CommentCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[CommentResponse]:
    comment = CommentService(db).add_comment(ticket_id, actor, data.text, data.is_internal)
    return success_response(
        CommentResponse.model_validate(comment), message="Comment added successfully"
    )


@router.post(
    "/tickets/{ticket_id}/feedback",
    response_model=ApiResponse[FeedbackResponse],
    status_code=201,
)
def submit_feedback(
    ticket_id: int,
    data: FeedbackCreate,
    actor: Actor = Depends(get_student_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[FeedbackResponse]:
    feedback = FeedbackService(db).submit_feedback(ticket_id, actor, data.rating, data.text)
    return success_response(
        FeedbackResponse.model_validate(feedback), message="Feedback submitted successfully"
    )
