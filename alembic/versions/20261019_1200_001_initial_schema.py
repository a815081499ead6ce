"""Initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 12:00:00.000000

Tables created:
- users: Telegram users
- groups: Watering scenarios
- plants: Plants attached to a scenario
- temporary: Per-user wizard step and draft
- notifications: Sent watering reminders
"""
from alembic import op
import sqlalchemy as sa
import logging

logger = logging.getLogger('alembic.runtime.migration')

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create initial schema."""
    logger.info("Step 1/5: Creating users table...")
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('telegram_id', sa.BigInteger(), nullable=False),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('firstname', sa.String(), nullable=True),
        sa.Column('lastname', sa.String(), nullable=True),
        sa.Column('is_bot', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_telegram_id', 'users', ['telegram_id'], unique=True)

    logger.info("Step 2/5: Creating groups table...")
    op.create_table(
        'groups',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('last_watering_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('next_watering_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('watering_interval', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'title', name='uq_groups_user_title')
    )
    op.create_index('ix_groups_user_id', 'groups', ['user_id'])
    op.create_index('ix_groups_next_watering_date', 'groups', ['next_watering_date'])

    logger.info("Step 3/5: Creating plants table...")
    op.create_table(
        'plants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('photo', sa.LargeBinary(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_id', 'title', name='uq_plants_group_title')
    )
    op.create_index('ix_plants_group_id', 'plants', ['group_id'])
    op.create_index('ix_plants_user_id', 'plants', ['user_id'])

    logger.info("Step 4/5: Creating temporary table...")
    op.create_table(
        'temporary',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('step', sa.Integer(), nullable=False),
        sa.Column('message_id', sa.BigInteger(), nullable=True),
        sa.Column('data', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )

    logger.info("Step 5/5: Creating notifications table...")
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('message_id', sa.BigInteger(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_group_id', 'notifications', ['group_id'])

    logger.info("✓ Initial schema created")


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index('ix_notifications_group_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_table('temporary')
    op.drop_index('ix_plants_user_id', table_name='plants')
    op.drop_index('ix_plants_group_id', table_name='plants')
    op.drop_table('plants')
    op.drop_index('ix_groups_next_watering_date', table_name='groups')
    op.drop_index('ix_groups_user_id', table_name='groups')
    op.drop_table('groups')
    op.drop_index('ix_users_telegram_id', table_name='users')
    op.drop_table('users')
