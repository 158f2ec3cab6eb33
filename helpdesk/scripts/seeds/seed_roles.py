"""
Seed the built-in helpdesk roles.

Idempotent: roles that already exist (active or not) are left untouched.

Usage:
    python helpdesk/scripts/seeds/seed_roles.py
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent.parent.parent.parent
sys.path.insert(0, str(project_root))

import helpdesk.db.base  # noqa: E402,F401
from helpdesk.core.exceptions import AppError  # noqa: E402
from helpdesk.db.session import SessionLocal  # noqa: E402
from helpdesk.rbac.permissions import SYSTEM_ROLES  # noqa: E402
from helpdesk.rbac.services.role_service import RoleService  # noqa: E402


def seed_roles() -> int:
    db = SessionLocal()
    try:
        created = RoleService(db).ensure_system_roles()
        if created:
            print(f"✓ Created {created} system role(s)")
        else:
            print("✓ System roles already present")
        for role in SYSTEM_ROLES:
            print(f"  - {role['role_name']}: {role['display_name']}")
        return 0
    except AppError as e:
        print(f"✗ Error seeding roles: {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(seed_roles())
