"""Initial MOF tracking schema

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

This migration creates:
1. users (attribution for MOFs, picks and verifications)
2. mofs (requests with stored workflow status)
3. items (serialized units, bound to a MOF by the first scan)
4. pick_records and verification_records (append-only audit trail)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. USERS TABLE
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_username'), ['username'], unique=False)

    # ==========================================================================
    # 2. MOFS TABLE
    # ==========================================================================
    op.create_table('mofs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('serial_number', sa.String(length=64), nullable=False),
        sa.Column('part_number', sa.String(length=64), nullable=False),
        sa.Column('quantity_requested', sa.Integer(), nullable=False),
        sa.Column('expected_receiving_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('requester_name', sa.String(length=255), nullable=False),
        sa.Column('department', sa.String(length=255), nullable=False),
        sa.Column('project', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='Pending'),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('serial_number', name='uq_mofs_serial_number'),
        sa.CheckConstraint('quantity_requested > 0', name='ck_mofs_quantity_positive'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('mofs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_mofs_part_number'), ['part_number'], unique=False)
        batch_op.create_index(batch_op.f('ix_mofs_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_mofs_created_by'), ['created_by'], unique=False)
        batch_op.create_index('ix_mofs_created_by_created_at', ['created_by', 'created_at'], unique=False)

    # ==========================================================================
    # 3. ITEMS TABLE
    # ==========================================================================
    op.create_table('items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('serial_number', sa.String(length=128), nullable=False),
        sa.Column('part_number', sa.String(length=64), nullable=False),
        sa.Column('supplier', sa.String(length=255), nullable=False),
        sa.Column('picked_by_picker', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('verified_by_requester', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('mof_id', sa.Integer(), nullable=True),
        sa.Column('picked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['mof_id'], ['mofs.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('serial_number', name='uq_items_serial_number'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_items_part_number'), ['part_number'], unique=False)
        batch_op.create_index(batch_op.f('ix_items_mof_id'), ['mof_id'], unique=False)
        batch_op.create_index('ix_items_mof_picked', ['mof_id', 'picked_by_picker'], unique=False)
        batch_op.create_index('ix_items_mof_verified', ['mof_id', 'verified_by_requester'], unique=False)

    # ==========================================================================
    # 4. AUDIT RECORD TABLES
    # ==========================================================================
    op.create_table('pick_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('mof_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('picked_by', sa.Integer(), nullable=False),
        sa.Column('picked_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['mof_id'], ['mofs.id'], ),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ),
        sa.ForeignKeyConstraint(['picked_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('pick_records', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_pick_records_mof_id'), ['mof_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_pick_records_item_id'), ['item_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_pick_records_picked_by'), ['picked_by'], unique=False)
        batch_op.create_index('ix_pick_records_mof_item', ['mof_id', 'item_id'], unique=False)

    op.create_table('verification_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('mof_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('verified_by', sa.Integer(), nullable=False),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['mof_id'], ['mofs.id'], ),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ),
        sa.ForeignKeyConstraint(['verified_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('verification_records', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_verification_records_mof_id'), ['mof_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_verification_records_item_id'), ['item_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_verification_records_verified_by'), ['verified_by'], unique=False)
        batch_op.create_index('ix_verification_records_mof_item', ['mof_id', 'item_id'], unique=False)


def downgrade():
    op.drop_table('verification_records')
    op.drop_table('pick_records')
    op.drop_table('items')
    op.drop_table('mofs')
    op.drop_table('users')
