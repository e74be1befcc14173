"""Create leave_table for attendance records

Revision ID: 001_leave_table
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_leave_table'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

attendance_category = sa.Enum(
    'wfh',
    'full_leave',
    'half_leave',
    'leave_early',
    'come_late',
    'out_of_office',
    'unknown',
    name='attendance_category',
)


def upgrade() -> None:
    op.create_table(
        'leave_table',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=50), nullable=False),
        sa.Column('user_name', sa.String(length=200), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=200), nullable=True),
        sa.Column('channel_id', sa.String(length=50), nullable=True),
        sa.Column('message_ts', sa.String(length=50), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('category', attendance_category, nullable=False, server_default='unknown'),
        sa.Column('confidence', sa.Float(), nullable=True),
        sa.Column('is_working_from_home', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_leave_requested', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_coming_late', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_leave_early', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('duration_days', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_index('ix_leave_table_user_id', 'leave_table', ['user_id'])
    op.create_index('ix_leave_table_message_ts', 'leave_table', ['message_ts'])
    op.create_index('ix_leave_table_start_date', 'leave_table', ['start_date'])
    op.create_index('ix_leave_table_end_date', 'leave_table', ['end_date'])
    # Overlap lookups filter on user and both dates
    op.create_index(
        'ix_leave_table_user_dates', 'leave_table', ['user_id', 'start_date', 'end_date']
    )


def downgrade() -> None:
    op.drop_index('ix_leave_table_user_dates', table_name='leave_table')
    op.drop_index('ix_leave_table_end_date', table_name='leave_table')
    op.drop_index('ix_leave_table_start_date', table_name='leave_table')
    op.drop_index('ix_leave_table_message_ts', table_name='leave_table')
    op.drop_index('ix_leave_table_user_id', table_name='leave_table')
    op.drop_table('leave_table')
    attendance_category.drop(op.get_bind(), checkfirst=True)
