"""create registered_users, friendships and status_updates

Revision ID: 7c1e4a9b2d30
Revises:
Create Date: 2026-10-18 09:12:44.512803

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c1e4a9b2d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'registered_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('hashed_password', sa.String(length=1024), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_superuser', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_registered_users_email', 'registered_users', ['email'], unique=True)
    op.create_index('ix_registered_users_username', 'registered_users', ['username'], unique=True)

    op.create_table(
        'friendships',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('friend_id', sa.Integer(), nullable=False),
        sa.Column('pair_key', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['registered_users.id']),
        sa.ForeignKeyConstraint(['friend_id'], ['registered_users.id']),
        sa.UniqueConstraint('pair_key', name='uq_friendships_pair_key'),
        sa.CheckConstraint('user_id <> friend_id', name='ck_friendships_not_self')
    )
    op.create_index('ix_friendships_id', 'friendships', ['id'])
    op.create_index('ix_friendships_user_id', 'friendships', ['user_id'])
    op.create_index('ix_friendships_friend_id', 'friendships', ['friend_id'])

    op.create_table(
        'status_updates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('status_type', sa.String(length=32), nullable=False),
        sa.Column('status_text', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['registered_users.id'])
    )
    op.create_index('ix_status_updates_user_latest', 'status_updates', ['user_id', 'created_at', 'id'])


def downgrade() -> None:
    op.drop_index('ix_status_updates_user_latest', 'status_updates')
    op.drop_table('status_updates')

    op.drop_index('ix_friendships_friend_id', 'friendships')
    op.drop_index('ix_friendships_user_id', 'friendships')
    op.drop_index('ix_friendships_id', 'friendships')
    op.drop_table('friendships')

    op.drop_index('ix_registered_users_username', 'registered_users')
    op.drop_index('ix_registered_users_email', 'registered_users')
    op.drop_table('registered_users')
