"""initial case workflow schema

Revision ID: 5a7c1d2e9b10
Revises:
Create Date: 2025-11-03 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a7c1d2e9b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'app_user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('nickname', sa.String(length=64), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_app_user_nickname', 'app_user', ['nickname'], unique=True)

    op.create_table(
        'case_info',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=128), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('difficulty', sa.Integer(), nullable=False),
        sa.Column('true_culprit_id', sa.Integer(), sa.ForeignKey('app_user.id'), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='registered'),
        sa.CheckConstraint('difficulty BETWEEN 1 AND 5', name='ck_case_difficulty'),
    )
    op.create_index('ix_case_info_status', 'case_info', ['status'])

    op.create_table(
        'case_participation',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('case_id', sa.Integer(), sa.ForeignKey('case_info.id'), nullable=False, unique=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('app_user.id'), nullable=True),
        sa.Column('culprit_id', sa.Integer(), sa.ForeignKey('app_user.id'), nullable=True),
        sa.Column('police_id', sa.Integer(), sa.ForeignKey('app_user.id'), nullable=True),
        sa.Column('detective_id', sa.Integer(), sa.ForeignKey('app_user.id'), nullable=True),
        sa.Column('detective_guess_id', sa.Integer(), sa.ForeignKey('app_user.id'), nullable=True),
        sa.Column('is_solved', sa.Boolean(), nullable=True),
    )

    op.create_table(
        'case_suspect',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('case_id', sa.Integer(), sa.ForeignKey('case_info.id'), nullable=False),
        sa.Column('suspect_name', sa.String(length=64), nullable=False),
    )
    op.create_index('ix_case_suspect_case_id', 'case_suspect', ['case_id'])

    op.create_table(
        'original_evidence',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('case_id', sa.Integer(), sa.ForeignKey('case_info.id'), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_true', sa.Boolean(), nullable=False),
        sa.Column('is_fake_candidate', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_original_evidence_case_id', 'original_evidence', ['case_id'])

    op.create_table(
        'submitted_evidence',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('case_id', sa.Integer(), sa.ForeignKey('case_info.id'), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_true_evidence', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_submitted_evidence_case_id', 'submitted_evidence', ['case_id'])

    op.create_table(
        'score_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('app_user.id'), nullable=False),
        sa.Column('case_id', sa.Integer(), sa.ForeignKey('case_info.id'), nullable=True),
        sa.Column('delta', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=64), nullable=False),
        sa.Column('log_time', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_score_log_user_id', 'score_log', ['user_id'])


def downgrade():
    op.drop_index('ix_score_log_user_id', table_name='score_log')
    op.drop_table('score_log')
    op.drop_index('ix_submitted_evidence_case_id', table_name='submitted_evidence')
    op.drop_table('submitted_evidence')
    op.drop_index('ix_original_evidence_case_id', table_name='original_evidence')
    op.drop_table('original_evidence')
    op.drop_index('ix_case_suspect_case_id', table_name='case_suspect')
    op.drop_table('case_suspect')
    op.drop_table('case_participation')
    op.drop_index('ix_case_info_status', table_name='case_info')
    op.drop_table('case_info')
    op.drop_index('ix_app_user_nickname', table_name='app_user')
    op.drop_table('app_user')
