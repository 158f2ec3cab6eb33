"""create_helpdesk_tables

Revision ID: 0001
Revises:
Create Date: 2026-10-16 09:12:40.512733

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_type = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    # students and rbac_users mirror tables owned by the wider platform
    op.create_table('students',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('admission_number', sa.String(length=50), nullable=False),
    sa.Column('student_name', sa.String(length=255), nullable=False),
    sa.Column('student_mobile', sa.String(length=20), nullable=True),
    sa.Column('student_email', sa.String(length=255), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_students_admission_number'), 'students', ['admission_number'], unique=True)
    op.create_table('rbac_users',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('username', sa.String(length=100), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=True),
    sa.Column('phone', sa.String(length=20), nullable=True),
    sa.Column('role', sa.String(length=50), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_rbac_users_username'), 'rbac_users', ['username'], unique=True)

    op.create_table('complaint_categories',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=100), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('parent_id', sa.Integer(), nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('display_order', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['parent_id'], ['complaint_categories.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_complaint_categories_parent_order', 'complaint_categories', ['parent_id', 'display_order'], unique=False)

    op.create_table('ticket_roles',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('role_name', sa.String(length=50), nullable=False),
    sa.Column('display_name', sa.String(length=100), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('permissions', json_type, nullable=False),
    sa.Column('is_system_role', sa.Boolean(), nullable=False),
    sa.Column('is_unrestricted', sa.Boolean(), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('created_by_ref', sa.Integer(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['created_by_ref'], ['rbac_users.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ticket_roles_role_name'), 'ticket_roles', ['role_name'], unique=True)
    op.create_index(op.f('ix_ticket_roles_is_active'), 'ticket_roles', ['is_active'], unique=False)

    op.create_table('ticket_employees',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('role', sa.String(length=20), nullable=False),
    sa.Column('identity_ref', sa.Integer(), nullable=True),
    sa.Column('custom_role_id', sa.Integer(), nullable=True),
    sa.Column('assigned_category_ids', json_type, nullable=False),
    sa.Column('assigned_sub_category_ids', json_type, nullable=False),
    sa.Column('permission_overrides', json_type, nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=True),
    sa.Column('username', sa.String(length=100), nullable=True),
    sa.Column('email', sa.String(length=255), nullable=True),
    sa.Column('phone', sa.String(length=20), nullable=True),
    sa.Column('password_hash', sa.String(length=255), nullable=True),
    sa.Column('created_by_ref', sa.Integer(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['custom_role_id'], ['ticket_roles.id'], ondelete='SET NULL'),
    sa.ForeignKeyConstraint(['identity_ref'], ['rbac_users.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('username'),
    )
    op.create_index(op.f('ix_ticket_employees_identity_ref'), 'ticket_employees', ['identity_ref'], unique=False)
    op.create_index('ix_ticket_employees_role_active', 'ticket_employees', ['role', 'is_active'], unique=False)

    op.create_table('tickets',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('ticket_number', sa.String(length=50), nullable=False),
    sa.Column('student_ref', sa.Integer(), nullable=False),
    sa.Column('admission_number', sa.String(length=50), nullable=False),
    sa.Column('category_id', sa.Integer(), nullable=False),
    sa.Column('sub_category_id', sa.Integer(), nullable=True),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=False),
    sa.Column('photo_ref', sa.String(length=500), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.Column('resolved_at', sa.DateTime(), nullable=True),
    sa.Column('closed_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['category_id'], ['complaint_categories.id'], ondelete='RESTRICT'),
    sa.ForeignKeyConstraint(['student_ref'], ['students.id'], ondelete='RESTRICT'),
    sa.ForeignKeyConstraint(['sub_category_id'], ['complaint_categories.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tickets_ticket_number'), 'tickets', ['ticket_number'], unique=True)
    op.create_index(op.f('ix_tickets_admission_number'), 'tickets', ['admission_number'], unique=False)
    op.create_index('ix_tickets_category', 'tickets', ['category_id'], unique=False)
    op.create_index('ix_tickets_status_created', 'tickets', ['status', 'created_at'], unique=False)
    op.create_index('ix_tickets_student_created', 'tickets', ['student_ref', 'created_at'], unique=False)

    op.create_table('ticket_assignments',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('ticket_id', sa.Integer(), nullable=False),
    sa.Column('employee_ref', sa.Integer(), nullable=False),
    sa.Column('assigned_by_ref', sa.Integer(), nullable=False),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('assigned_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['employee_ref'], ['ticket_employees.id'], ondelete='RESTRICT'),
    sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ticket_assignments_employee_ref'), 'ticket_assignments', ['employee_ref'], unique=False)
    op.create_index('ix_ticket_assignments_ticket_active', 'ticket_assignments', ['ticket_id', 'is_active'], unique=False)

    op.create_table('ticket_status_history',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('ticket_id', sa.Integer(), nullable=False),
    sa.Column('old_status', sa.String(length=20), nullable=True),
    sa.Column('new_status', sa.String(length=20), nullable=False),
    sa.Column('changed_by_ref', sa.Integer(), nullable=False),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ticket_status_history_ticket_id'), 'ticket_status_history', ['ticket_id'], unique=False)

    op.create_table('ticket_comments',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('ticket_id', sa.Integer(), nullable=False),
    sa.Column('author_ref', sa.Integer(), nullable=False),
    sa.Column('author_kind', sa.String(length=20), nullable=False),
    sa.Column('text', sa.Text(), nullable=False),
    sa.Column('is_internal', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ticket_comments_ticket_id'), 'ticket_comments', ['ticket_id'], unique=False)

    op.create_table('ticket_feedback',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('ticket_id', sa.Integer(), nullable=False),
    sa.Column('student_ref', sa.Integer(), nullable=False),
    sa.Column('rating', sa.Integer(), nullable=False),
    sa.Column('text', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_ticket_feedback_rating'),
    sa.ForeignKeyConstraint(['student_ref'], ['students.id'], ondelete='RESTRICT'),
    sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('ticket_id'),
    )


def downgrade() -> None:
    op.drop_table('ticket_feedback')
    op.drop_index(op.f('ix_ticket_comments_ticket_id'), table_name='ticket_comments')
    op.drop_table('ticket_comments')
    op.drop_index(op.f('ix_ticket_status_history_ticket_id'), table_name='ticket_status_history')
    op.drop_table('ticket_status_history')
    op.drop_index('ix_ticket_assignments_ticket_active', table_name='ticket_assignments')
    op.drop_index(op.f('ix_ticket_assignments_employee_ref'), table_name='ticket_assignments')
    op.drop_table('ticket_assignments')
    op.drop_index('ix_tickets_student_created', table_name='tickets')
    op.drop_index('ix_tickets_status_created', table_name='tickets')
    op.drop_index('ix_tickets_category', table_name='tickets')
    op.drop_index(op.f('ix_tickets_admission_number'), table_name='tickets')
    op.drop_index(op.f('ix_tickets_ticket_number'), table_name='tickets')
    op.drop_table('tickets')
    op.drop_index('ix_ticket_employees_role_active', table_name='ticket_employees')
    op.drop_index(op.f('ix_ticket_employees_identity_ref'), table_name='ticket_employees')
    op.drop_table('ticket_employees')
    op.drop_index(op.f('ix_ticket_roles_is_active'), table_name='ticket_roles')
    op.drop_index(op.f('ix_ticket_roles_role_name'), table_name='ticket_roles')
    op.drop_table('ticket_roles')
    op.drop_index('ix_complaint_categories_parent_order', table_name='complaint_categories')
    op.drop_table('complaint_categories')
    op.drop_index(op.f('ix_rbac_users_username'), table_name='rbac_users')
    op.drop_table('rbac_users')
    op.drop_index(op.f('ix_students_admission_number'), table_name='students')
    op.drop_table('students')
