import logging
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.categories.models.category import Category
from helpdesk.categories.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from helpdesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from helpdesk.core.repository import BaseRepository
from helpdesk.db.session import commit_or_rollback
from helpdesk.rbac.permissions import Module, Operation
from helpdesk.rbac.services.permission_service import PermissionService
from helpdesk.tickets.models.ticket import Ticket

logger = logging.getLogger(__name__)


class CategoryService:
    """Two-level category taxonomy. A parent must itself be a main category."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.categories = BaseRepository(db, Category)
        self.permissions = PermissionService(db)

    def get(self, category_id: int) -> Category:
        category = self.categories.get_by_id(category_id)
        if not category:
            raise NotFoundError(
                "Category not found", resource="category", error_code="CATEGORY_NOT_FOUND"
            )
        return category

    def _clean_name(self, name: str | None) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError(
                "Category name is required", field="name", error_code="EMPTY_NAME"
            )
        return cleaned

    def _validate_parent(self, parent_id: int) -> Category:
        parent = self.categories.get_by_id(parent_id)
        if parent is None:
            raise ValidationError(
                "Parent category not found", field="parent_id", error_code="INVALID_PARENT"
            )
        if parent.is_sub_category:
            raise ValidationError(
                "Cannot nest under a sub-category (only 2 levels allowed)",
                field="parent_id",
                error_code="INVALID_PARENT",
            )
        return parent

    def _has_children(self, category_id: int) -> bool:
        return (
            self.db.query(Category.id).filter(Category.parent_id == category_id).first()
            is not None
        )

    def create_category(self, data: CategoryCreate, actor: Actor) -> Category:
        self.permissions.require(actor, Module.CATEGORY_MANAGEMENT, Operation.WRITE)
        name = self._clean_name(data.name)
        if data.parent_id is not None:
            self._validate_parent(data.parent_id)

        category = Category(
            name=name,
            description=data.description,
            parent_id=data.parent_id,
            display_order=data.display_order,
            is_active=True,
        )
        self.db.add(category)
        commit_or_rollback(self.db, "create_category")
        self.db.refresh(category)
        logger.info("Category created: %s (id=%s, parent=%s)", name, category.id, data.parent_id)
        return category

    def update_category(self, category_id: int, data: CategoryUpdate, actor: Actor) -> Category:
        self.permissions.require(actor, Module.CATEGORY_MANAGEMENT, Operation.UPDATE)
        category = self.get(category_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update", error_code="NO_FIELDS")

        if "name" in changes:
            changes["name"] = self._clean_name(changes["name"])

        if "parent_id" in changes and changes["parent_id"] != category.parent_id:
            new_parent_id = changes["parent_id"]
            if new_parent_id is not None:
                if new_parent_id == category.id:
                    raise ValidationError(
                        "Category cannot be its own parent",
                        field="parent_id",
                        error_code="INVALID_PARENT",
                    )
                self._validate_parent(new_parent_id)
                if self._has_children(category.id):
                    raise ValidationError(
                        "A category with sub-categories cannot become a sub-category",
                        field="parent_id",
                        error_code="INVALID_PARENT",
                    )

        for field, value in changes.items():
            if value is None and field in ("is_active", "display_order"):
                continue
            setattr(category, field, value)

        commit_or_rollback(self.db, "update_category")
        self.db.refresh(category)
        logger.info("Category updated: id=%s fields=%s", category.id, sorted(changes))
        return category

    def delete_category(self, category_id: int, actor: Actor) -> None:
        self.permissions.require(actor, Module.CATEGORY_MANAGEMENT, Operation.DELETE)
        category = self.get(category_id)
        if self._has_children(category.id):
            raise ConflictError(
                "Cannot delete category with sub-categories. Delete sub-categories first.",
                resource="category",
                error_code="HAS_CHILDREN",
            )
        referenced = (
            self.db.query(Ticket.id)
            .filter(or_(Ticket.category_id == category.id, Ticket.sub_category_id == category.id))
            .first()
        )
        if referenced is not None:
            raise ConflictError(
                "Cannot delete category that is used in tickets",
                resource="category",
                error_code="IN_USE",
            )
        self.categories.delete(category)
        commit_or_rollback(self.db, "delete_category")
        logger.info("Category deleted: id=%s by actor %s", category_id, actor.id)

    def _build_tree(self, categories: list[Category]) -> list[CategoryTreeNode]:
        children: dict[int, list[Category]] = {}
        for category in categories:
            if category.parent_id is not None:
                children.setdefault(category.parent_id, []).append(category)

        tree = []
        for category in categories:
            if category.parent_id is not None:
                continue
            subs = [CategoryResponse.model_validate(c) for c in children.get(category.id, [])]
            node = CategoryTreeNode.model_validate(category)
            node.sub_categories = subs
            node.has_sub_categories = bool(subs)
            tree.append(node)
        return tree

    def list_categories(self) -> list[CategoryTreeNode]:
        categories = (
            self.db.query(Category).order_by(Category.display_order, Category.name).all()
        )
        return self._build_tree(categories)

    def list_active_categories(self) -> list[CategoryTreeNode]:
        """Student-facing tree; a sub-category under an inactive main is hidden too."""
        categories = (
            self.db.query(Category)
            .filter(Category.is_active == True)  # noqa: E712
            .order_by(Category.display_order, Category.name)
            .all()
        )
        return self._build_tree(categories)

    def get_category(self, category_id: int) -> CategoryTreeNode:
        category = self.get(category_id)
        subs = (
            self.db.query(Category)
            .filter(Category.parent_id == category.id)
            .order_by(Category.display_order, Category.name)
            .all()
        )
        node = CategoryTreeNode.model_validate(category)
        node.sub_categories = [CategoryResponse.model_validate(c) for c in subs]
        node.has_sub_categories = bool(subs)
        return node
