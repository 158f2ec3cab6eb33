"""Application-wide constants.

This module centralizes magic numbers shared across the helpdesk domains.
For environment-specific configuration, see config.py.
"""

# =============================================================================
# Pagination Defaults
# =============================================================================

# Default page size for ticket listings
DEFAULT_PAGE_SIZE: int = 50

# Maximum page size to prevent abuse
MAX_PAGE_SIZE: int = 100

# Number of main categories reported in ticket statistics
STATS_TOP_CATEGORIES_LIMIT: int = 10

# =============================================================================
# Content Limits
# =============================================================================

TICKET_TITLE_MAX_LENGTH: int = 255
TICKET_DESCRIPTION_MAX_LENGTH: int = 5000
COMMENT_MAX_LENGTH: int = 5000
FEEDBACK_TEXT_MAX_LENGTH: int = 2000
CATEGORY_NAME_MAX_LENGTH: int = 100

# =============================================================================
# Feedback
# =============================================================================

FEEDBACK_MIN_RATING: int = 1
FEEDBACK_MAX_RATING: int = 5

# =============================================================================
# Identity
# =============================================================================

# Role carried by tokens issued to students by the wider platform
STUDENT_ROLE: str = "student"

# Identity-store roles that are never offered for employee assignment
NON_ASSIGNABLE_IDENTITY_ROLES: tuple[str, ...] = ("super_admin", "student")

# Role synced onto an identity once it is wrapped as a manager
MANAGER_IDENTITY_ROLE: str = "staff"
