"""Create tasks, users and user_pending_tasks

Revision ID: 001_tasks_and_users
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_tasks_and_users'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Creates:
    1. users, with a unique email
    2. tasks, indexed by assigned_user for the clear-all-tasks sweep
    3. user_pending_tasks, one row per (user, task id) entry of pendingTasks
    """
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=500), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('assigned_user', sa.String(length=36), nullable=False, server_default=''),
        sa.Column('assigned_user_name', sa.String(length=500), nullable=False, server_default='unassigned'),
        sa.Column('date_created', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_tasks_assigned_user', 'tasks', ['assigned_user'])

    op.create_table(
        'user_pending_tasks',
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('task_id', sa.String(length=36), primary_key=True),
    )
    op.create_index('ix_user_pending_tasks_task_id', 'user_pending_tasks', ['task_id'])


def downgrade() -> None:
    op.drop_index('ix_user_pending_tasks_task_id', table_name='user_pending_tasks')
    op.drop_table('user_pending_tasks')
    op.drop_index('ix_tasks_assigned_user', table_name='tasks')
    op.drop_table('tasks')
    op.drop_table('users')
