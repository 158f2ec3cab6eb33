from datetime import datetime

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base


class Identity(Base):
    """
    Staff account in the shared identity store.

    Attributes:
        id: Integer primary key, the ``sub`` of tokens issued to staff
        name: Display name
        username: Login name, unique within the store
        email: Contact email
        phone: Contact phone (nullable)
        role: Platform role name (``super_admin``, ``admin``, ``staff`` ...)
        is_active: Whether the account may sign in
    """

    __tablename__ = "rbac_users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    role: Mapped[str] = mapped_column(String(50), default="staff")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        return f"<Identity(id={self.id}, username={self.username}, role={self.role})>"
