"""Initial schema: users, permission sets, accounts, sales transactions

Revision ID: 20261017_initial
Revises:
Create Date: 2026-10-17

This migration adds:
1. users (with nullable manager_id) and session_tokens
2. permissions, permission_sets, and their grant/object/field/assignment tables
3. accounts (owner_id)
4. sales_transactions (account_id, sale_date, amount_cents)
5. security_events
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261017_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. USERS AND SESSIONS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('manager_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['manager_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_username'), ['username'], unique=True)
        batch_op.create_index('ix_users_manager_id', ['manager_id'], unique=False)

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index(batch_op.f('ix_session_tokens_expires_at'), ['expires_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_is_revoked'), ['is_revoked'], unique=False)
        batch_op.create_index('ix_session_tokens_user_active', ['user_id', 'is_revoked'], unique=False)

    # ==========================================================================
    # 2. PERMISSIONS AND PERMISSION SETS
    # ==========================================================================
    op.create_table('permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('permissions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_permissions_code'), ['code'], unique=True)
        batch_op.create_index(batch_op.f('ix_permissions_category'), ['category'], unique=False)

    op.create_table('permission_sets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('label', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('permission_sets', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_permission_sets_name'), ['name'], unique=True)

    op.create_table('permission_set_grants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('permission_set_id', sa.Integer(), nullable=False),
        sa.Column('permission_id', sa.Integer(), nullable=False),
        sa.Column('granted_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['permission_set_id'], ['permission_sets.id'], ),
        sa.ForeignKeyConstraint(['permission_id'], ['permissions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('permission_set_id', 'permission_id', name='uq_permission_set_grants'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('permission_set_grants', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_permission_set_grants_permission_set_id'), ['permission_set_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_permission_set_grants_permission_id'), ['permission_id'], unique=False)

    op.create_table('object_permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('permission_set_id', sa.Integer(), nullable=False),
        sa.Column('object_name', sa.String(length=64), nullable=False),
        sa.Column('can_read', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('can_create', sa.Boolean(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['permission_set_id'], ['permission_sets.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('permission_set_id', 'object_name', name='uq_object_permissions'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('object_permissions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_object_permissions_permission_set_id'), ['permission_set_id'], unique=False)

    op.create_table('field_permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('permission_set_id', sa.Integer(), nullable=False),
        sa.Column('object_name', sa.String(length=64), nullable=False),
        sa.Column('field_name', sa.String(length=64), nullable=False),
        sa.Column('can_read', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('can_edit', sa.Boolean(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['permission_set_id'], ['permission_sets.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('permission_set_id', 'object_name', 'field_name', name='uq_field_permissions'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('field_permissions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_field_permissions_permission_set_id'), ['permission_set_id'], unique=False)

    op.create_table('permission_set_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('permission_set_id', sa.Integer(), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['permission_set_id'], ['permission_sets.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'permission_set_id', name='uq_permission_set_assignments'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('permission_set_assignments', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_permission_set_assignments_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_permission_set_assignments_permission_set_id'), ['permission_set_id'], unique=False)

    # ==========================================================================
    # 3. ACCOUNTS
    # ==========================================================================
    op.create_table('accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('accounts', schema=None) as batch_op:
        batch_op.create_index('ix_accounts_owner_id', ['owner_id'], unique=False)

    # ==========================================================================
    # 4. SALES TRANSACTIONS
    # ==========================================================================
    op.create_table('sales_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('sale_date', sa.Date(), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('sales_transactions', schema=None) as batch_op:
        batch_op.create_index('ix_sales_transactions_account_date', ['account_id', 'sale_date'], unique=False)

    # ==========================================================================
    # 5. SECURITY EVENTS
    # ==========================================================================
    op.create_table('security_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(length=64), nullable=False),
        sa.Column('resource', sa.String(length=128), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('security_events', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_security_events_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_security_events_event_type'), ['event_type'], unique=False)
        batch_op.create_index(batch_op.f('ix_security_events_success'), ['success'], unique=False)
        batch_op.create_index('ix_security_events_user_type', ['user_id', 'event_type'], unique=False)
        batch_op.create_index('ix_security_events_occurred', ['occurred_at'], unique=False)


def downgrade():
    op.drop_table('security_events')
    op.drop_table('sales_transactions')
    op.drop_table('accounts')
    op.drop_table('permission_set_assignments')
    op.drop_table('field_permissions')
    op.drop_table('object_permissions')
    op.drop_table('permission_set_grants')
    op.drop_table('permission_sets')
    op.drop_table('permissions')
    op.drop_table('session_tokens')
    op.drop_table('users')
