"""create competition tables

Revision ID: 3b1f0c9a7d21
Revises: 
Create Date: 2026-10-12 10:21:04.118342

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f0c9a7d21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


competition_phase = sa.Enum('preparation', 'voting', 'finished', name='competition_phase')
ranking_mode = sa.Enum('simple', 'bayesian', name='ranking_mode')


def upgrade() -> None:
    op.create_table(
        'competitions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('admin_pin_hash', sa.String(), nullable=False),
        sa.Column('phase', competition_phase, nullable=False, server_default='preparation'),
        sa.Column('ranking_mode', ranking_mode, nullable=False, server_default='simple'),
        sa.Column('allow_guests', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('max_participants', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_competitions_code', 'competitions', ['code'], unique=True)

    op.create_table(
        'participants',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('competition_id', sa.String(), sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('nickname', sa.String(), nullable=False),
        sa.Column('pin_hash', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='participant'),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('competition_id', 'nickname', name='uq_participants_competition_nickname'),
    )
    op.create_index('ix_participants_competition_id', 'participants', ['competition_id'])

    op.create_table(
        'dishes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('competition_id', sa.String(), sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('participant_id', sa.String(), sa.ForeignKey('participants.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('chef_name', sa.String(length=50), nullable=False),
        sa.Column('ingredients', sa.Text(), nullable=True),
        sa.Column('recipe', sa.Text(), nullable=True),
        sa.Column('story', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('competition_id', 'participant_id', name='uq_dishes_competition_participant'),
    )
    op.create_index('ix_dishes_competition_id', 'dishes', ['competition_id'])
    op.create_index('ix_dishes_participant_id', 'dishes', ['participant_id'])

    op.create_table(
        'photos',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('dish_id', sa.String(), sa.ForeignKey('dishes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_extra', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_photos_dish_id', 'photos', ['dish_id'])

    op.create_table(
        'votes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('competition_id', sa.String(), sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('participant_id', sa.String(), sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('dish_id', sa.String(), sa.ForeignKey('dishes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('competition_id', 'participant_id', name='uq_votes_competition_participant'),
        sa.CheckConstraint('score BETWEEN 1 AND 10', name='ck_votes_score_range'),
    )
    op.create_index('ix_votes_competition_id', 'votes', ['competition_id'])
    op.create_index('ix_votes_dish_id', 'votes', ['dish_id'])

    op.create_table(
        'login_attempts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('competition_code', sa.String(length=6), nullable=False),
        sa.Column('nickname', sa.String(), nullable=False),
        sa.Column('attempted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_login_attempts_lookup', 'login_attempts', ['competition_code', 'nickname', 'attempted_at'])


def downgrade() -> None:
    # 역순 삭제
    op.drop_index('idx_login_attempts_lookup', table_name='login_attempts')
    op.drop_table('login_attempts')
    op.drop_index('ix_votes_dish_id', table_name='votes')
    op.drop_index('ix_votes_competition_id', table_name='votes')
    op.drop_table('votes')
    op.drop_index('ix_photos_dish_id', table_name='photos')
    op.drop_table('photos')
    op.drop_index('ix_dishes_participant_id', table_name='dishes')
    op.drop_index('ix_dishes_competition_id', table_name='dishes')
    op.drop_table('dishes')
    op.drop_index('ix_participants_competition_id', table_name='participants')
    op.drop_table('participants')
    op.drop_index('ix_competitions_code', table_name='competitions')
    op.drop_table('competitions')
    ranking_mode.drop(op.get_bind(), checkfirst=True)
    competition_phase.drop(op.get_bind(), checkfirst=True)
