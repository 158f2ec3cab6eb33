"""
Unit tests for RoleService.
"""

import pytest
from sqlalchemy.orm import Session

from helpdesk.core.exceptions import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from helpdesk.rbac.models.role import Role
from helpdesk.rbac.permissions import MODULE_CATALOG, SYSTEM_ROLES, PermissionMatrix
from helpdesk.rbac.schemas.role import RoleCreate, RoleUpdate
from helpdesk.rbac.services.role_service import RoleService
from tests.utils.factories import (
    create_identity_factory,
    create_manager_factory,
    create_role_factory,
)
from tests.utils.helpers import identity_actor


@pytest.fixture
def settings_editor(db_session: Session):
    """A manager whose custom role may edit settings but is not unrestricted."""
    role = create_role_factory(
        db_session,
        role_name="settings_editor",
        permissions={"ticket_settings": {"read": True, "write": True, "update": True}},
    )
    identity = create_identity_factory(db_session, role="staff")
    create_manager_factory(db_session, identity=identity, custom_role=role)
    return identity_actor(identity)


class TestEnsureSystemRoles:
    """Tests for ensure_system_roles method."""

    def test_seeds_every_system_role_once(self, db_session: Session):
        """Test that seeding is idempotent."""
        service = RoleService(db_session)

        first = service.ensure_system_roles()
        second = service.ensure_system_roles()

        assert first == len(SYSTEM_ROLES)
        assert second == 0
        names = {r.role_name for r in db_session.query(Role).all()}
        assert {"super_admin", "admin", "manager", "staff", "worker"} <= names

    def test_seeded_admin_roles_are_unrestricted(self, db_session: Session, system_roles):
        admin = db_session.query(Role).filter(Role.role_name == "admin").one()
        worker = db_session.query(Role).filter(Role.role_name == "worker").one()

        assert admin.is_system_role is True
        assert admin.is_unrestricted is True
        assert worker.is_unrestricted is False


class TestCreateRole:
    """Tests for create_role method."""

    def test_creates_role_with_matrix(self, db_session: Session, admin_actor):
        """Test that omitted grants in the matrix are stored as false."""
        service = RoleService(db_session)
        matrix = PermissionMatrix.from_stored({"ticket_reports": {"read": True}})

        role = service.create_role(
            admin_actor,
            RoleCreate(role_name="report_viewer", display_name="Report Viewer", permissions=matrix),
        )

        assert role.id is not None
        assert role.is_system_role is False
        assert role.matrix.allows("ticket_reports", "read") is True
        assert role.matrix.allows("ticket_reports", "write") is False

    @pytest.mark.parametrize("role_name", ["Report-Viewer", "viewer1", "has space"])
    def test_rejects_invalid_role_name(self, db_session: Session, admin_actor, role_name):
        """Test that role names must be lowercase letters and underscores."""
        service = RoleService(db_session)

        with pytest.raises(ValidationError) as exc_info:
            service.create_role(admin_actor, RoleCreate(role_name=role_name, display_name="X"))

        assert exc_info.value.error_code == "INVALID_FORMAT"

    def test_rejects_duplicate_role_name(self, db_session: Session, admin_actor):
        create_role_factory(db_session, role_name="night_shift")
        service = RoleService(db_session)

        with pytest.raises(ConflictError) as exc_info:
            service.create_role(
                admin_actor, RoleCreate(role_name="night_shift", display_name="Night")
            )

        assert exc_info.value.error_code == "DUPLICATE_ROLE"

    def test_restricted_actor_cannot_grant_unrestricted(
        self, db_session: Session, settings_editor
    ):
        """Test that only unrestricted actors may create unrestricted roles."""
        service = RoleService(db_session)

        with pytest.raises(AccessDeniedError):
            service.create_role(
                settings_editor,
                RoleCreate(role_name="shadow_admin", display_name="Shadow", is_unrestricted=True),
            )

        assert service.roles.find_by_name("shadow_admin") is None

    def test_restricted_actor_with_settings_write_creates_plain_role(
        self, db_session: Session, settings_editor
    ):
        """Test that a ticket_settings.write grant is enough for ordinary roles."""
        service = RoleService(db_session)

        role = service.create_role(
            settings_editor, RoleCreate(role_name="front_desk", display_name="Front Desk")
        )

        assert role.is_unrestricted is False


class TestUpdateRole:
    """Tests for update_role method."""

    def test_requires_fields(self, db_session: Session, admin_actor):
        role = create_role_factory(db_session, role_name="auditors")
        service = RoleService(db_session)

        with pytest.raises(ValidationError) as exc_info:
            service.update_role(role.id, RoleUpdate(), admin_actor)

        assert exc_info.value.error_code == "NO_FIELDS"

    def test_replaces_permissions(self, db_session: Session, admin_actor):
        """Test that the stored matrix is replaced, not merged."""
        role = create_role_factory(
            db_session, role_name="desk_clerk", permissions={"ticket_dashboard": {"read": True}}
        )
        service = RoleService(db_session)
        new_matrix = PermissionMatrix.from_stored({"ticket_management": {"read": True}})

        updated = service.update_role(role.id, RoleUpdate(permissions=new_matrix), admin_actor)

        assert updated.matrix.allows("ticket_management", "read") is True
        assert updated.matrix.allows("ticket_dashboard", "read") is False

    def test_rename_to_existing_name_conflicts(self, db_session: Session, admin_actor):
        create_role_factory(db_session, role_name="first_role")
        second = create_role_factory(db_session, role_name="second_role")
        service = RoleService(db_session)

        with pytest.raises(ConflictError) as exc_info:
            service.update_role(second.id, RoleUpdate(role_name="first_role"), admin_actor)

        assert exc_info.value.error_code == "DUPLICATE_ROLE"

    def test_unknown_role_raises_not_found(self, db_session: Session, admin_actor):
        service = RoleService(db_session)

        with pytest.raises(NotFoundError) as exc_info:
            service.update_role(999999, RoleUpdate(display_name="Ghost"), admin_actor)

        assert exc_info.value.error_code == "ROLE_NOT_FOUND"


class TestDeleteRole:
    """Tests for delete_role method."""

    def test_soft_deletes_unused_role(self, db_session: Session, admin_actor):
        """Test that deleting only deactivates the role."""
        role = create_role_factory(db_session, role_name="temp_role")
        service = RoleService(db_session)

        service.delete_role(role.id, admin_actor)

        db_session.refresh(role)
        assert role.is_active is False
        assert role.id not in [r.id for r in service.list_roles()]
        assert role.id in [r.id for r in service.list_roles(include_inactive=True)]

    def test_refuses_role_in_use(self, db_session: Session, admin_actor):
        role = create_role_factory(db_session, role_name="busy_role")
        create_manager_factory(db_session, custom_role=role)
        service = RoleService(db_session)

        with pytest.raises(ConflictError) as exc_info:
            service.delete_role(role.id, admin_actor)

        assert exc_info.value.error_code == "ROLE_IN_USE"


class TestRolePermissions:
    """Tests that role mutations are gated on ticket_settings."""

    def test_staff_cannot_create(self, db_session: Session, system_roles, test_staff):
        """Test that the seeded staff role has no ticket_settings.write grant."""
        service = RoleService(db_session)

        with pytest.raises(AccessDeniedError):
            service.create_role(
                identity_actor(test_staff), RoleCreate(role_name="sneaky", display_name="Sneaky")
            )

        assert service.roles.find_by_name("sneaky") is None

    def test_staff_cannot_update(self, db_session: Session, system_roles, test_staff):
        role = create_role_factory(db_session, role_name="locked_role")
        service = RoleService(db_session)

        with pytest.raises(AccessDeniedError):
            service.update_role(
                role.id, RoleUpdate(display_name="Changed"), identity_actor(test_staff)
            )

    def test_settings_editor_cannot_delete(self, db_session: Session, settings_editor):
        """Test that a write/update grant does not imply delete."""
        role = create_role_factory(db_session, role_name="keep_me")
        service = RoleService(db_session)

        with pytest.raises(AccessDeniedError):
            service.delete_role(role.id, settings_editor)

        db_session.refresh(role)
        assert role.is_active is True


class TestListRoles:
    """Tests for list_roles and module_catalog."""

    def test_system_roles_listed_first_with_counts(self, db_session: Session, system_roles):
        """Test ordering and the per-role active employee count."""
        custom = create_role_factory(db_session, role_name="aaa_custom")
        create_manager_factory(db_session, custom_role=custom)
        service = RoleService(db_session)

        roles = service.list_roles()

        assert roles[0].is_system_role is True
        custom_response = next(r for r in roles if r.id == custom.id)
        assert custom_response.employee_count == 1

    def test_module_catalog_lists_all_modules(self):
        catalog = RoleService.module_catalog()

        assert catalog is MODULE_CATALOG
        assert set(catalog) == {
            "ticket_dashboard",
            "ticket_management",
            "employee_management",
            "category_management",
            "ticket_reports",
            "ticket_settings",
        }
        assert catalog["ticket_management"]["label"] == "Ticket Management"
