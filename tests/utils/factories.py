from typing import Any

from faker import Faker
from sqlalchemy.orm import Session

from helpdesk.categories.models.category import Category
from helpdesk.core.security import get_password_hash
from helpdesk.directory.models.identity import Identity
from helpdesk.directory.models.student import Student
from helpdesk.employees.models.employee import Manager, Worker
from helpdesk.rbac.models.role import Role
from helpdesk.tickets.models.ticket import Ticket, TicketStatus
from helpdesk.tickets.utils.ticket_number import generate_ticket_number

fake = Faker()


def create_student_factory(
    db_session: Session,
    admission_number: str | None = None,
    student_name: str | None = None,
) -> Student:
    """
    Factory function to create platform student records.

    Args:
        db_session: Database session
        admission_number: Admission number (generates random if None)
        student_name: Student name (generates random if None)

    Returns:
        Created Student instance
    """
    student = Student(
        admission_number=admission_number or f"ADM-{fake.unique.random_number(digits=6)}",
        student_name=student_name or fake.name(),
        student_mobile=fake.msisdn()[:10],
        student_email=fake.email(),
    )
    db_session.add(student)
    db_session.commit()
    db_session.refresh(student)
    return student


def create_identity_factory(
    db_session: Session,
    username: str | None = None,
    name: str | None = None,
    role: str = "staff",
    is_active: bool = True,
) -> Identity:
    identity = Identity(
        name=name or fake.name(),
        username=username or fake.unique.user_name(),
        email=fake.email(),
        phone=fake.msisdn()[:10],
        role=role,
        is_active=is_active,
    )
    db_session.add(identity)
    db_session.commit()
    db_session.refresh(identity)
    return identity


def create_role_factory(
    db_session: Session,
    role_name: str | None = None,
    permissions: dict[str, Any] | None = None,
    is_unrestricted: bool = False,
    is_active: bool = True,
) -> Role:
    role = Role(
        role_name=role_name or fake.unique.word().lower(),
        display_name=fake.job()[:100],
        description=None,
        permissions=permissions or {},
        is_system_role=False,
        is_unrestricted=is_unrestricted,
        is_active=is_active,
    )
    db_session.add(role)
    db_session.commit()
    db_session.refresh(role)
    return role


def create_category_factory(
    db_session: Session,
    name: str | None = None,
    parent: Category | None = None,
    is_active: bool = True,
    display_order: int = 0,
) -> Category:
    category = Category(
        name=name or fake.unique.word().title(),
        description=fake.sentence(),
        parent_id=parent.id if parent else None,
        is_active=is_active,
        display_order=display_order,
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


def create_manager_factory(
    db_session: Session,
    identity: Identity | None = None,
    category_ids: list[int] | None = None,
    sub_category_ids: list[int] | None = None,
    custom_role: Role | None = None,
    permission_overrides: dict[str, Any] | None = None,
    is_active: bool = True,
) -> Manager:
    identity = identity or create_identity_factory(db_session)
    manager = Manager(
        identity_ref=identity.id,
        custom_role_id=custom_role.id if custom_role else None,
        assigned_category_ids=category_ids or [],
        assigned_sub_category_ids=sub_category_ids or [],
        permission_overrides=permission_overrides,
        is_active=is_active,
    )
    db_session.add(manager)
    db_session.commit()
    db_session.refresh(manager)
    return manager


def create_worker_factory(
    db_session: Session,
    username: str | None = None,
    password: str = "workerpass1",
    name: str | None = None,
    custom_role: Role | None = None,
    is_active: bool = True,
) -> Worker:
    worker = Worker(
        name=name or fake.name(),
        username=username or fake.unique.user_name(),
        password_hash=get_password_hash(password),
        custom_role_id=custom_role.id if custom_role else None,
        assigned_category_ids=[],
        assigned_sub_category_ids=[],
        is_active=is_active,
    )
    db_session.add(worker)
    db_session.commit()
    db_session.refresh(worker)
    return worker


def create_ticket_factory(
    db_session: Session,
    student: Student,
    category: Category,
    sub_category: Category | None = None,
    status: str = TicketStatus.PENDING.value,
    title: str | None = None,
) -> Ticket:
    ticket = Ticket(
        ticket_number=generate_ticket_number(),
        student_ref=student.id,
        admission_number=student.admission_number,
        category_id=category.id,
        sub_category_id=sub_category.id if sub_category else None,
        title=title or fake.sentence(nb_words=5)[:255],
        description=fake.paragraph(),
        status=status,
    )
    db_session.add(ticket)
    db_session.commit()
    db_session.refresh(ticket)
    return ticket
