"""initial schema: users, habits, habit_completions, support_messages

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('avatar', sa.Text(), nullable=True),
        sa.Column('email_reminders', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('daily_reminder', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('weekly_summary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('timezone', sa.String(length=64), nullable=False, server_default='Asia/Kolkata'),
        sa.Column('week_start', sa.String(length=10), nullable=False, server_default='monday'),
        sa.Column('theme_preference', sa.String(length=10), nullable=False, server_default='system'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'habits',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=True),
        sa.Column('frequency', sa.String(length=20), nullable=False, server_default='daily'),
        sa.Column('reminder_time', sa.String(length=5), nullable=True),
        sa.Column('reminder_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_reminder_date', sa.Date(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_habits_user_id', 'habits', ['user_id'])
    op.create_index('ix_habits_reminder_time', 'habits', ['reminder_time'])
    op.create_index('ix_habits_reminder_enabled', 'habits', ['reminder_enabled'])
    op.create_index('ix_habits_active', 'habits', ['active'])

    op.create_table(
        'habit_completions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('habit_id', sa.Integer(), sa.ForeignKey('habits.id'), nullable=False),
        sa.Column('day', sa.Date(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('user_id', 'habit_id', 'day', name='uq_habit_completions_user_habit_day'),
    )
    op.create_index('ix_habit_completions_user_id', 'habit_completions', ['user_id'])
    op.create_index('ix_habit_completions_habit_id', 'habit_completions', ['habit_id'])
    op.create_index('ix_habit_completions_day', 'habit_completions', ['day'])

    op.create_table(
        'support_messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('category', sa.String(length=40), nullable=False, server_default='Other'),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_support_messages_user_id', 'support_messages', ['user_id'])
    op.create_index('ix_support_messages_created_at', 'support_messages', ['created_at'])


def downgrade() -> None:
    op.drop_table('support_messages')
    op.drop_table('habit_completions')
    op.drop_table('habits')
    op.drop_table('users')
