"""Create filter_lists, filter_instances and user_bans

Revision ID: 3f9c1a7d2e10
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2e10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'filter_lists',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('token', sa.Text(), nullable=False),
        sa.Column('downloaded', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', name='uq_filter_lists_user_id'),
        sa.UniqueConstraint('token', name='uq_filter_lists_token'),
    )

    op.create_table(
        'filter_instances',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('filter_list_id', sa.Integer(), sa.ForeignKey('filter_lists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('filter_name', sa.Text(), nullable=False),
        sa.Column('params', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('test_mode', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('filter_list_id', 'filter_name', name='uq_instance_list_filter'),
    )
    op.create_index('ix_filter_instances_filter_list_id', 'filter_instances', ['filter_list_id'])

    op.create_table(
        'user_bans',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('reason', sa.Text(), server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('lifted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_user_bans_user_id', 'user_bans', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_user_bans_user_id', table_name='user_bans')
    op.drop_table('user_bans')
    op.drop_index('ix_filter_instances_filter_list_id', table_name='filter_instances')
    op.drop_table('filter_instances')
    op.drop_table('filter_lists')
