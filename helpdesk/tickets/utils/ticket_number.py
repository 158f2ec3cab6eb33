import secrets
from datetime import UTC, datetime

from helpdesk.core.config import settings


def generate_ticket_number(prefix: str | None = None, now: datetime | None = None) -> str:
    """Build ``<prefix>-<year>-<last 6 digits of epoch ms>-<3 random digits>``.

    Uniqueness is enforced by the database; a rejected insert surfaces as a
    retryable storage error.
    """
    prefix = prefix or settings.TICKET_NUMBER_PREFIX
    now = now or datetime.now(UTC)
    time_part = str(int(now.timestamp() * 1000))[-6:]
    random_part = f"{secrets.randbelow(1000):03d}"
    return f"{prefix}-{now.year}-{time_part}-{random_part}"
