"""initial schema: catalog, staff, roles, permission rows, audit

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', sa.String(length=36), primary_key=True)


def _updated_at():
    return sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))


def upgrade():
    op.create_table('modules',
        _id(),
        sa.Column('module_key', sa.String(length=64), nullable=False, unique=True),
        sa.Column('module_name', sa.String(length=128), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
    )
    op.create_index('ix_modules_module_key', 'modules', ['module_key'])

    op.create_table('sub_modules',
        _id(),
        sa.Column('module_id', sa.String(length=36), sa.ForeignKey('modules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sub_module_key', sa.String(length=64), nullable=False),
        sa.Column('sub_module_name', sa.String(length=128), nullable=False),
        sa.Column('route_path', sa.String(length=255), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
        sa.UniqueConstraint('module_id', 'sub_module_key', name='uq_sub_module_key'),
    )
    op.create_index('ix_sub_modules_module_id', 'sub_modules', ['module_id'])

    op.create_table('permission_categories',
        _id(),
        sa.Column('sub_module_id', sa.String(length=36), sa.ForeignKey('sub_modules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_key', sa.String(length=64), nullable=False),
        sa.Column('category_name', sa.String(length=128), nullable=False),
        sa.Column('category_type', sa.String(length=32), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
        sa.UniqueConstraint('sub_module_id', 'category_key', name='uq_category_key'),
    )
    op.create_index('ix_permission_categories_sub_module_id', 'permission_categories', ['sub_module_id'])

    op.create_table('staff',
        _id(),
        sa.Column('school_code', sa.String(length=32), nullable=False),
        sa.Column('staff_id', sa.String(length=64), nullable=False),
        sa.Column('full_name', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=True),
        sa.Column('designation', sa.String(length=64), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_principal', sa.Boolean(), nullable=True, server_default=sa.text('0')),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
        sa.UniqueConstraint('school_code', 'staff_id', name='uq_staff_school_staff_id'),
    )
    op.create_index('ix_staff_school_code', 'staff', ['school_code'])
    op.create_index('ix_staff_email', 'staff', ['email'])

    op.create_table('roles',
        _id(),
        sa.Column('school_code', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('is_system', sa.Boolean(), nullable=True, server_default=sa.text('0')),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
        sa.UniqueConstraint('school_code', 'name', name='uq_role_school_name'),
    )
    op.create_index('ix_roles_school_code', 'roles', ['school_code'])

    op.create_table('staff_roles',
        _id(),
        sa.Column('staff_id', sa.String(length=36), sa.ForeignKey('staff.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role_id', sa.String(length=36), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
        sa.Column('assigned_by', sa.String(length=36), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('staff_id', 'role_id', name='uq_staff_role'),
    )
    op.create_index('ix_staff_roles_staff_id', 'staff_roles', ['staff_id'])

    op.create_table('role_permissions',
        _id(),
        sa.Column('role_id', sa.String(length=36), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sub_module_id', sa.String(length=36), sa.ForeignKey('sub_modules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.String(length=36), sa.ForeignKey('permission_categories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('view_access', sa.Boolean(), nullable=True, server_default=sa.text('0')),
        sa.Column('edit_access', sa.Boolean(), nullable=True, server_default=sa.text('0')),
        _updated_at(),
        sa.UniqueConstraint('role_id', 'sub_module_id', 'category_id', name='uq_role_permission'),
    )
    op.create_index('ix_role_permissions_role_id', 'role_permissions', ['role_id'])

    op.create_table('staff_permissions',
        _id(),
        sa.Column('staff_id', sa.String(length=36), sa.ForeignKey('staff.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sub_module_id', sa.String(length=36), sa.ForeignKey('sub_modules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.String(length=36), sa.ForeignKey('permission_categories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('view_access', sa.Boolean(), nullable=True, server_default=sa.text('0')),
        sa.Column('edit_access', sa.Boolean(), nullable=True, server_default=sa.text('0')),
        sa.Column('assigned_by', sa.String(length=36), nullable=True),
        _updated_at(),
        sa.UniqueConstraint('staff_id', 'sub_module_id', 'category_id', name='uq_staff_permission'),
    )
    op.create_index('ix_staff_permissions_staff_id', 'staff_permissions', ['staff_id'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('school_code', sa.String(length=32), nullable=False),
        sa.Column('actor_staff_id', sa.String(length=36), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64), nullable=True),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_audit_logs_school_code', 'audit_logs', ['school_code'])
    op.create_index('ix_audit_logs_actor_staff_id', 'audit_logs', ['actor_staff_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade():
    for table in ('audit_logs', 'staff_permissions', 'role_permissions', 'staff_roles', 'roles', 'staff',
                  'permission_categories', 'sub_modules', 'modules'):
        op.drop_table(table)
