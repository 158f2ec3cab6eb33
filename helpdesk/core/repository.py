"""Base repository pattern implementation.

Repositories only stage changes on the session; committing is left to the
calling service so several writes can share one transaction.
"""

from typing import Generic, TypeVar, cast

from sqlalchemy.orm import Query, Session, lazyload

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Generic repository with common lookups.

    Example:
        ```python
        class RoleRepository(BaseRepository[Role]):
            def __init__(self, db: Session):
                super().__init__(db, Role)

            def find_by_name(self, role_name: str) -> Role | None:
                return self.db.query(Role).filter(Role.role_name == role_name).first()
        ```
    """

    def __init__(self, db: Session, model: type[ModelType]):
        self.db = db
        self.model = model

    def lookup_query(self, entity_id: int, *, for_update: bool = False) -> Query:
        """Primary-key query, optionally taking a row lock until commit.

        PostgreSQL refuses ``FOR UPDATE`` on the nullable side of an outer join,
        so a locking lookup skips eager joins and locks only this table.
        """
        query = self.db.query(self.model).filter(self.model.id == entity_id)  # type: ignore[attr-defined]
        if for_update:
            query = query.options(lazyload("*")).with_for_update(of=self.model)
        return query

    def get_by_id(self, entity_id: int, *, for_update: bool = False) -> ModelType | None:
        """Get a single entity by primary key.

        Args:
            entity_id: The integer id of the entity.
            for_update: Take a row lock (``SELECT ... FOR UPDATE``) until commit.

        Returns:
            The entity if found, None otherwise.
        """
        return cast(ModelType | None, self.lookup_query(entity_id, for_update=for_update).first())

    def delete(self, instance: ModelType) -> None:
        self.db.delete(instance)
