from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from helpdesk.core.constants import (
    COMMENT_MAX_LENGTH,
    FEEDBACK_TEXT_MAX_LENGTH,
    TICKET_DESCRIPTION_MAX_LENGTH,
    TICKET_TITLE_MAX_LENGTH,
)
from helpdesk.core.datetime_utils import UTCDatetime

if TYPE_CHECKING:
    from helpdesk.tickets.models.assignment import Assignment


class TicketCreate(BaseModel):
    category_id: int
    sub_category_id: int | None = None
    title: str = Field(..., max_length=TICKET_TITLE_MAX_LENGTH)
    description: str = Field(..., max_length=TICKET_DESCRIPTION_MAX_LENGTH)
    photo_ref: str | None = Field(None, max_length=500)
    # Staff filing on behalf of a student name them explicitly
    admission_number: str | None = None


class TicketAssignRequest(BaseModel):
    employee_ids: list[int]
    notes: str | None = None


class TicketStatusUpdate(BaseModel):
    status: str
    notes: str | None = None


class CommentCreate(BaseModel):
    text: str = Field(..., max_length=COMMENT_MAX_LENGTH)
    is_internal: bool = False


class FeedbackCreate(BaseModel):
    rating: int
    text: str | None = Field(None, max_length=FEEDBACK_TEXT_MAX_LENGTH)


class AssignmentResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: str
    employee_username: str | None = None
    employee_kind: str
    assigned_by_ref: int
    notes: str | None = None
    is_active: bool
    assigned_at: UTCDatetime

    @classmethod
    def from_assignment(cls, assignment: "Assignment") -> "AssignmentResponse":
        employee = assignment.employee
        return cls(
            id=assignment.id,
            employee_id=assignment.employee_ref,
            employee_name=employee.display_name,
            employee_username=employee.account_username,
            employee_kind=employee.role,
            assigned_by_ref=assignment.assigned_by_ref,
            notes=assignment.notes,
            is_active=assignment.is_active,
            assigned_at=assignment.assigned_at,
        )


class StatusHistoryResponse(BaseModel):
    id: int
    old_status: str | None = None
    new_status: str
    changed_by_ref: int
    notes: str | None = None
    created_at: UTCDatetime

    class Config:
        from_attributes = True


class CommentResponse(BaseModel):
    id: int
    ticket_id: int
    author_ref: int
    author_kind: str
    text: str
    is_internal: bool
    created_at: UTCDatetime

    class Config:
        from_attributes = True


class FeedbackResponse(BaseModel):
    id: int
    ticket_id: int
    student_ref: int
    rating: int
    text: str | None = None
    created_at: UTCDatetime

    class Config:
        from_attributes = True


class TicketListItem(BaseModel):
    id: int
    ticket_number: str
    student_ref: int
    admission_number: str
    student_name: str | None = None
    category_id: int
    category_name: str | None = None
    sub_category_id: int | None = None
    sub_category_name: str | None = None
    title: str
    status: str
    assigned_to: list[str] = []
    created_at: UTCDatetime
    updated_at: UTCDatetime
    resolved_at: UTCDatetime | None = None
    closed_at: UTCDatetime | None = None


class TicketDetailResponse(TicketListItem):
    description: str
    photo_ref: str | None = None
    assignments: list[AssignmentResponse] = []
    status_history: list[StatusHistoryResponse] = []
    comments: list[CommentResponse] = []
    feedback: FeedbackResponse | None = None


class CategoryTicketCount(BaseModel):
    category_id: int
    category_name: str
    count: int


class TicketStatsResponse(BaseModel):
    total: int
    status_counts: dict[str, int]
    top_categories: list[CategoryTicketCount]
