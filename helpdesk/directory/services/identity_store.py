import logging
from collections.abc import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from helpdesk.core.constants import NON_ASSIGNABLE_IDENTITY_ROLES
from helpdesk.directory.models.identity import Identity

logger = logging.getLogger(__name__)


class IdentityStore:
    """Read access to shared staff accounts, plus the one write the helpdesk makes.

    ``sync_role`` only stages the change; the calling service commits it
    together with its own rows.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, identity_id: int) -> Identity | None:
        identity: Identity | None = (
            self.db.query(Identity).filter(Identity.id == identity_id).first()
        )
        return identity

    def username_exists(self, username: str) -> bool:
        return (
            self.db.query(Identity.id)
            .filter(func.lower(Identity.username) == username.lower())
            .first()
            is not None
        )

    def list_available(self, excluded_ids: Iterable[int]) -> list[Identity]:
        query = self.db.query(Identity).filter(
            Identity.is_active == True,  # noqa: E712
            Identity.role.notin_(NON_ASSIGNABLE_IDENTITY_ROLES),
        )
        excluded = list(excluded_ids)
        if excluded:
            query = query.filter(Identity.id.notin_(excluded))
        return query.order_by(Identity.name.asc()).all()

    def sync_role(self, identity: Identity, role_name: str) -> None:
        if identity.role == role_name:
            return
        logger.info(
            "Syncing identity %s role %s -> %s", identity.id, identity.role, role_name
        )
        identity.role = role_name
