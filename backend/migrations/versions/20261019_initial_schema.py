"""Initial stock control schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

Creates:
1. products, locations (master data)
2. users (role + capability tags)
3. transfers (lifecycle, JSON item/shortage/damage snapshots)
4. email_settings (singleton "default" row)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. MASTER DATA
    # ==========================================================================
    op.create_table('products',
        sa.Column('pk', sa.Integer(), nullable=False),
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=120), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('pk'),
        sa.UniqueConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index('ix_products_code', ['code'], unique=False)

    op.create_table('locations',
        sa.Column('pk', sa.Integer(), nullable=False),
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('pk'),
        sa.UniqueConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('locations', schema=None) as batch_op:
        batch_op.create_index('ix_locations_name', ['name'], unique=False)

    # ==========================================================================
    # 2. USERS
    # ==========================================================================
    op.create_table('users',
        sa.Column('pk', sa.Integer(), nullable=False),
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('pk'),
        sa.UniqueConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index('ix_users_email', ['email'], unique=False)

    # ==========================================================================
    # 3. TRANSFERS
    # ==========================================================================
    op.create_table('transfers',
        sa.Column('pk', sa.Integer(), nullable=False),
        sa.Column('id', sa.String(length=40), nullable=False),
        sa.Column('from_location_id', sa.String(length=36), nullable=False),
        sa.Column('to_location_id', sa.String(length=36), nullable=False),
        sa.Column('driver_name', sa.String(length=255), nullable=False),
        sa.Column('vehicle_reg', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('shortages', sa.JSON(), nullable=True),
        sa.Column('damages', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.String(length=36), nullable=False),
        sa.Column('dispatched_by', sa.String(length=36), nullable=True),
        sa.Column('received_by', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('dispatched_at', sa.DateTime(), nullable=True),
        sa.Column('received_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('pk'),
        sa.UniqueConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('transfers', schema=None) as batch_op:
        batch_op.create_index('ix_transfers_status', ['status'], unique=False)
        batch_op.create_index('ix_transfers_created_at', ['created_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_transfers_from_location_id'), ['from_location_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_transfers_to_location_id'), ['to_location_id'], unique=False)

    # ==========================================================================
    # 4. EMAIL SETTINGS
    # ==========================================================================
    op.create_table('email_settings',
        sa.Column('id', sa.String(length=16), nullable=False),
        sa.Column('provider', sa.String(length=32), nullable=True),
        sa.Column('recipient_email', sa.String(length=255), nullable=True),
        sa.Column('sender_email', sa.String(length=255), nullable=True),
        sa.Column('smtp_host', sa.String(length=255), nullable=True),
        sa.Column('smtp_port', sa.Integer(), nullable=True),
        sa.Column('smtp_username', sa.String(length=255), nullable=True),
        sa.Column('smtp_password', sa.String(length=255), nullable=True),
        sa.Column('api_key', sa.String(length=255), nullable=True),
        sa.Column('configured', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('email_settings')

    with op.batch_alter_table('transfers', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_transfers_to_location_id'))
        batch_op.drop_index(batch_op.f('ix_transfers_from_location_id'))
        batch_op.drop_index('ix_transfers_created_at')
        batch_op.drop_index('ix_transfers_status')
    op.drop_table('transfers')

    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_index('ix_users_email')
    op.drop_table('users')

    with op.batch_alter_table('locations', schema=None) as batch_op:
        batch_op.drop_index('ix_locations_name')
    op.drop_table('locations')

    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.drop_index('ix_products_code')
    op.drop_table('products')
