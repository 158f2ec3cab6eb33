"""
Unit tests for TicketService.
"""

import re

import pytest
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.core.exceptions import (
    AccessDeniedError,
    NotFoundError,
    TransientStorageError,
    ValidationError,
)
from helpdesk.tickets.models.status_history import StatusHistoryEntry
from helpdesk.tickets.models.ticket import TicketStatus
from helpdesk.tickets.schemas.ticket import TicketCreate
from helpdesk.tickets.services import ticket_service as ticket_service_module
from helpdesk.tickets.services.ticket_service import TicketService
from tests.utils.factories import (
    create_category_factory,
    create_identity_factory,
    create_student_factory,
    create_ticket_factory,
)
from tests.utils.helpers import identity_actor, student_actor


def _ticket_data(category, sub_category=None, **overrides) -> TicketCreate:
    payload = {
        "category_id": category.id,
        "sub_category_id": sub_category.id if sub_category else None,
        "title": "Leaking tap",
        "description": "The tap in room 204 has been leaking for two days.",
    }
    payload.update(overrides)
    return TicketCreate(**payload)


class TestCreateTicket:
    """Tests for create_ticket method."""

    def test_student_files_pending_ticket(
        self, db_session: Session, test_student, main_category, sub_category
    ):
        """Test that a student's ticket starts pending with a fresh number."""
        service = TicketService(db_session)

        ticket = service.create_ticket(
            student_actor(test_student), _ticket_data(main_category, sub_category)
        )

        assert ticket.id is not None
        assert ticket.status == TicketStatus.PENDING.value
        assert ticket.student_ref == test_student.id
        assert ticket.admission_number == test_student.admission_number
        assert re.fullmatch(r"TKT-\d{4}-\d{6}-\d{3}", ticket.ticket_number)
        assert ticket.resolved_at is None
        assert ticket.closed_at is None

    def test_staff_files_on_behalf_of_student(
        self, db_session: Session, system_roles, test_student, main_category
    ):
        """Test that staff with ticket_management.write file for a named student."""
        staff = identity_actor(create_identity_factory(db_session, role="staff"))
        service = TicketService(db_session)

        ticket = service.create_ticket(
            staff, _ticket_data(main_category, admission_number=test_student.admission_number)
        )

        assert ticket.student_ref == test_student.id

    def test_staff_must_name_student(self, db_session: Session, system_roles, main_category):
        """Test that staff must pass an admission number."""
        staff = identity_actor(create_identity_factory(db_session, role="staff"))
        service = TicketService(db_session)

        with pytest.raises(ValidationError) as exc_info:
            service.create_ticket(staff, _ticket_data(main_category))

        assert exc_info.value.error_code == "EMPTY_FIELD"

    def test_unknown_student_rejected(self, db_session: Session, main_category):
        """Test that an unresolvable admission number returns STUDENT_NOT_FOUND."""
        actor = Actor(id=424242, role="student", admission_number="NOPE-1")
        service = TicketService(db_session)

        with pytest.raises(NotFoundError) as exc_info:
            service.create_ticket(actor, _ticket_data(main_category))

        assert exc_info.value.error_code == "STUDENT_NOT_FOUND"

    @pytest.mark.parametrize("field", ["title", "description"])
    def test_blank_text_rejected(self, db_session: Session, test_student, main_category, field):
        """Test that blank title or description is rejected."""
        service = TicketService(db_session)

        with pytest.raises(ValidationError) as exc_info:
            service.create_ticket(
                student_actor(test_student), _ticket_data(main_category, **{field: "   "})
            )

        assert exc_info.value.error_code == "EMPTY_FIELD"

    def test_sub_category_as_main_rejected(
        self, db_session: Session, test_student, sub_category
    ):
        """Test that a sub-category cannot be filed as the main category."""
        service = TicketService(db_session)

        with pytest.raises(ValidationError) as exc_info:
            service.create_ticket(student_actor(test_student), _ticket_data(sub_category))

        assert exc_info.value.error_code == "INVALID_CATEGORY"

    def test_inactive_category_rejected(self, db_session: Session, test_student):
        """Test that inactive categories do not accept tickets."""
        inactive = create_category_factory(db_session, is_active=False)
        service = TicketService(db_session)

        with pytest.raises(ValidationError) as exc_info:
            service.create_ticket(student_actor(test_student), _ticket_data(inactive))

        assert exc_info.value.error_code == "INACTIVE_CATEGORY"

    def test_sub_category_of_other_main_rejected(
        self, db_session: Session, test_student, sub_category, other_category
    ):
        """Test that the sub-category must belong to the chosen main category."""
        service = TicketService(db_session)

        with pytest.raises(ValidationError) as exc_info:
            service.create_ticket(
                student_actor(test_student), _ticket_data(other_category, sub_category)
            )

        assert exc_info.value.error_code == "INVALID_SUB_CATEGORY"

    def test_unknown_category_rejected(self, db_session: Session, test_student):
        service = TicketService(db_session)

        with pytest.raises(NotFoundError) as exc_info:
            service.create_ticket(
                student_actor(test_student),
                TicketCreate(category_id=999999, title="Broken", description="Desk broken"),
            )

        assert exc_info.value.error_code == "CATEGORY_NOT_FOUND"

    def test_ticket_number_collision_is_transient(
        self, db_session: Session, test_student, main_category, monkeypatch
    ):
        """Test that a duplicate ticket number surfaces as a retryable error."""
        existing = create_ticket_factory(db_session, test_student, main_category)
        monkeypatch.setattr(
            ticket_service_module, "generate_ticket_number", lambda: existing.ticket_number
        )
        service = TicketService(db_session)

        with pytest.raises(TransientStorageError) as exc_info:
            service.create_ticket(student_actor(test_student), _ticket_data(main_category))

        assert exc_info.value.error_code == "TICKET_NUMBER_COLLISION"
        assert exc_info.value.status_code == 503


class TestReadTickets:
    """Tests for get_ticket and the listings."""

    def test_student_cannot_read_foreign_ticket(
        self, db_session: Session, test_student, other_student, main_category
    ):
        """Test that students get 403 on another student's ticket."""
        ticket = create_ticket_factory(db_session, other_student, main_category)
        service = TicketService(db_session)

        with pytest.raises(AccessDeniedError):
            service.get_ticket(ticket.id, student_actor(test_student))

    def test_student_reads_own_ticket(self, db_session: Session, test_student, main_category):
        ticket = create_ticket_factory(db_session, test_student, main_category)
        service = TicketService(db_session)

        assert service.get_ticket(ticket.id, student_actor(test_student)).id == ticket.id

    def test_missing_ticket(self, db_session: Session, test_student):
        service = TicketService(db_session)

        with pytest.raises(NotFoundError) as exc_info:
            service.get_ticket(999999, student_actor(test_student))

        assert exc_info.value.error_code == "TICKET_NOT_FOUND"

    def test_student_listing_only_returns_own_tickets(
        self, db_session: Session, test_student, other_student, main_category
    ):
        """Test that the student listing is scoped to the caller."""
        mine = create_ticket_factory(db_session, test_student, main_category)
        create_ticket_factory(db_session, other_student, main_category)
        service = TicketService(db_session)

        tickets, total = service.list_tickets(student_actor(test_student))

        assert total == 1
        assert [t.id for t in tickets] == [mine.id]

    def test_staff_listing_filters(
        self, db_session: Session, test_student, main_category, other_category
    ):
        """Test the status, category, assignee and student filters."""
        admin = identity_actor(create_identity_factory(db_session, role="admin"))
        hostel = create_ticket_factory(db_session, test_student, main_category)
        create_ticket_factory(
            db_session, test_student, other_category, status=TicketStatus.CLOSED.value
        )
        service = TicketService(db_session)

        by_category, total = service.list_tickets(admin, category_id=main_category.id)
        closed, closed_total = service.list_tickets(admin, status_filter="closed")

        assert total == 1
        assert by_category[0].id == hostel.id
        assert closed_total == 1
        assert closed[0].category_id == other_category.id

    def test_staff_listing_paginates(self, db_session: Session, test_student, main_category):
        """Test page and limit with the total count."""
        admin = identity_actor(create_identity_factory(db_session, role="admin"))
        for _ in range(5):
            create_ticket_factory(db_session, test_student, main_category)
        service = TicketService(db_session)

        page_one, total = service.list_tickets(admin, page=1, limit=2)
        page_three, _ = service.list_tickets(admin, page=3, limit=2)

        assert total == 5
        assert len(page_one) == 2
        assert len(page_three) == 1

    def test_staff_without_permission_denied(
        self, db_session: Session, test_student, main_category
    ):
        """Test that listing needs ticket_management.read."""
        outsider = identity_actor(create_identity_factory(db_session, role="visitor"))
        ticket = create_ticket_factory(db_session, test_student, main_category)
        service = TicketService(db_session)

        with pytest.raises(AccessDeniedError):
            service.get_ticket(ticket.id, outsider)


class TestChangeStatus:
    """Tests for change_status method."""

    def test_completed_sets_resolved_at_and_history(
        self, db_session: Session, test_student, main_category
    ):
        """Test that completing a ticket stamps resolved_at and writes history."""
        admin = identity_actor(create_identity_factory(db_session, role="admin"))
        ticket = create_ticket_factory(db_session, test_student, main_category)
        service = TicketService(db_session)

        updated = service.change_status(ticket.id, "completed", admin, notes="fixed")

        assert updated.status == "completed"
        assert updated.resolved_at is not None
        assert updated.closed_at is None
        history = (
            db_session.query(StatusHistoryEntry)
            .filter(StatusHistoryEntry.ticket_id == ticket.id)
            .all()
        )
        assert len(history) == 1
        assert history[0].old_status == "pending"
        assert history[0].new_status == "completed"
        assert history[0].changed_by_ref == admin.id
        assert history[0].notes == "fixed"

    def test_closed_sets_closed_at(self, db_session: Session, test_student, main_category):
        """Test that closing a ticket stamps closed_at."""
        admin = identity_actor(create_identity_factory(db_session, role="admin"))
        ticket = create_ticket_factory(db_session, test_student, main_category)
        service = TicketService(db_session)

        updated = service.change_status(ticket.id, "closed", admin)

        assert updated.closed_at is not None

    def test_invalid_status_rejected(self, db_session: Session, test_student, main_category):
        """Test that unknown statuses are rejected."""
        admin = identity_actor(create_identity_factory(db_session, role="admin"))
        ticket = create_ticket_factory(db_session, test_student, main_category)
        service = TicketService(db_session)

        with pytest.raises(ValidationError) as exc_info:
            service.change_status(ticket.id, "reopened", admin)

        assert exc_info.value.error_code == "INVALID_STATUS"
        db_session.refresh(ticket)
        assert ticket.status == "pending"

    def test_student_cannot_change_status(
        self, db_session: Session, test_student, main_category
    ):
        """Test that students cannot change status."""
        ticket = create_ticket_factory(db_session, test_student, main_category)
        service = TicketService(db_session)

        with pytest.raises(AccessDeniedError):
            service.change_status(ticket.id, "closed", student_actor(test_student))

    def test_history_rows_are_append_only(
        self, db_session: Session, test_student, main_category
    ):
        """Test that editing a history row fails."""
        admin = identity_actor(create_identity_factory(db_session, role="admin"))
        ticket = create_ticket_factory(db_session, test_student, main_category)
        TicketService(db_session).change_status(ticket.id, "resolving", admin)
        entry = (
            db_session.query(StatusHistoryEntry)
            .filter(StatusHistoryEntry.ticket_id == ticket.id)
            .one()
        )

        entry.notes = "rewritten"
        with pytest.raises(RuntimeError):
            db_session.flush()


class TestTicketStats:
    """Tests for ticket_stats and response building."""

    def test_counts_by_status_and_category(
        self, db_session: Session, test_student, main_category, other_category
    ):
        """Test counts per status and the top main categories."""
        admin = identity_actor(create_identity_factory(db_session, role="admin"))
        create_ticket_factory(db_session, test_student, main_category)
        create_ticket_factory(db_session, test_student, main_category)
        create_ticket_factory(
            db_session, test_student, other_category, status=TicketStatus.COMPLETED.value
        )
        service = TicketService(db_session)

        stats = service.ticket_stats(admin)

        assert stats.total == 3
        assert stats.status_counts == {
            "pending": 2,
            "approaching": 0,
            "resolving": 0,
            "completed": 1,
            "closed": 0,
        }
        assert stats.top_categories[0].category_id == main_category.id
        assert stats.top_categories[0].count == 2

    def test_requires_reports_permission(self, db_session: Session, test_worker):
        """Test that stats need ticket_reports.read."""
        worker_actor = Actor(id=test_worker.id, role="worker", is_worker=True)
        service = TicketService(db_session)

        with pytest.raises(AccessDeniedError):
            service.ticket_stats(worker_actor)

    def test_detail_response_carries_display_names(self, db_session: Session, main_category):
        """Test that detail responses resolve category and assignee names."""
        student = create_student_factory(db_session)
        ticket = create_ticket_factory(db_session, student, main_category)
        service = TicketService(db_session)

        detail = service.build_detail_response(ticket, student_actor(student))

        assert detail.ticket_number == ticket.ticket_number
        assert detail.category_name == "Hostel"
        assert detail.student_name == student.student_name
        assert detail.assignments == []
        assert detail.feedback is None
