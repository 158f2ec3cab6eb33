from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.core.constants import CATEGORY_NAME_MAX_LENGTH
from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base


class Category(Base):
    """Node of the two-level complaint taxonomy. Sub-categories are leaves."""

    __tablename__ = "complaint_categories"
    __table_args__ = (Index("ix_complaint_categories_parent_order", "parent_id", "display_order"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(CATEGORY_NAME_MAX_LENGTH))
    description: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("complaint_categories.id", ondelete="RESTRICT"), nullable=True, default=None
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)

    parent = relationship("Category", remote_side=[id], back_populates="children")
    children = relationship(
        "Category",
        back_populates="parent",
        order_by="[Category.display_order, Category.name]",
    )

    @property
    def is_sub_category(self) -> bool:
        return self.parent_id is not None

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name}, parent_id={self.parent_id})>"
