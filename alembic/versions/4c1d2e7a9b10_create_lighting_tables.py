"""create_lighting_tables

Revision ID: 4c1d2e7a9b10
Revises:
Create Date: 2026-10-17 09:00:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4c1d2e7a9b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the lamp registry, reading history, control log and
    system settings tables.

    sensor_data and control_logs reference devices.id with ON DELETE
    CASCADE so removing a lamp removes its history.
    """
    op.create_table(
        'devices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('device_id', sa.String(length=100), nullable=False),
        sa.Column('device_name', sa.String(length=200), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=3), nullable=False, server_default='OFF'),
        sa.Column('mode', sa.String(length=6), nullable=False, server_default='MANUAL'),
        sa.Column('is_online', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_seen', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('ON', 'OFF')", name='ck_devices_status'),
        sa.CheckConstraint("mode IN ('AUTO', 'MANUAL')", name='ck_devices_mode'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_devices_device_id', 'devices', ['device_id'], unique=True)

    op.create_table(
        'sensor_data',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), autoincrement=True, nullable=False),
        sa.Column('device_ref', sa.Integer(), nullable=False),
        sa.Column('light_intensity', sa.Float(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['device_ref'], ['devices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sensor_data_timestamp', 'sensor_data', ['timestamp'])
    op.create_index('ix_sensor_data_device_timestamp', 'sensor_data', ['device_ref', 'timestamp'])

    op.create_table(
        'control_logs',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), autoincrement=True, nullable=False),
        sa.Column('device_ref', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=11), nullable=False),
        sa.Column('mode', sa.String(length=6), nullable=False),
        sa.Column('actor', sa.String(length=100), nullable=True),
        sa.Column('details', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("action IN ('ON', 'OFF', 'MODE_CHANGE')", name='ck_control_logs_action'),
        sa.CheckConstraint("mode IN ('AUTO', 'MANUAL')", name='ck_control_logs_mode'),
        sa.ForeignKeyConstraint(['device_ref'], ['devices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_control_logs_timestamp', 'control_logs', ['timestamp'])
    op.create_index('ix_control_logs_device_timestamp', 'control_logs', ['device_ref', 'timestamp'])

    op.create_table(
        'system_settings',
        sa.Column('setting_key', sa.String(length=100), nullable=False),
        sa.Column('setting_value', sa.String(length=255), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('setting_key'),
    )


def downgrade() -> None:
    op.drop_table('system_settings')
    op.drop_index('ix_control_logs_device_timestamp', table_name='control_logs')
    op.drop_index('ix_control_logs_timestamp', table_name='control_logs')
    op.drop_table('control_logs')
    op.drop_index('ix_sensor_data_device_timestamp', table_name='sensor_data')
    op.drop_index('ix_sensor_data_timestamp', table_name='sensor_data')
    op.drop_table('sensor_data')
    op.drop_index('ix_devices_device_id', table_name='devices')
    op.drop_table('devices')
