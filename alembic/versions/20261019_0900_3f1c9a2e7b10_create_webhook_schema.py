"""create_webhook_schema

Revision ID: 3f1c9a2e7b10
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a2e7b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade() -> None:
    """Apply migration changes."""
    op.create_table(
        'repositories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('github_id', sa.BigInteger(), nullable=False),
        sa.Column('full_name', sa.String(300), nullable=False),
        sa.Column('url', sa.String(500), nullable=False),
        sa.Column('owner_login', sa.String(200), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('github_id', name='uq_repositories_github_id')
    )

    op.create_table(
        'reviewer_frequency_summaries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('repository_id', sa.Uuid(), nullable=False),
        sa.Column('review_summary', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['repository_id'], ['repositories.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('repository_id', name='uq_reviewer_frequency_summaries_repository_id')
    )

    op.create_table(
        'pull_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('github_id', sa.BigInteger(), nullable=False),
        sa.Column('repository_id', sa.Uuid(), nullable=False),
        sa.Column('pr_number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('author', sa.String(100), nullable=True),
        sa.Column('url', sa.String(500), nullable=True),
        sa.Column('state', sa.Enum('OPEN', 'CLOSED', name='prstate'), nullable=False),
        sa.Column('base_branch', sa.String(200), nullable=False),
        sa.Column('head_branch', sa.String(200), nullable=False),
        sa.Column('labels', sa.JSON(), nullable=False),
        sa.Column('review_difficulty', sa.Float(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['repository_id'], ['repositories.id'], ondelete='CASCADE')
    )
    op.create_index('ix_pull_requests_github_id', 'pull_requests', ['github_id'], unique=True)

    op.create_table(
        'review_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('pr_github_id', sa.BigInteger(), nullable=False),
        sa.Column('reviewer', sa.String(200), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('pr_github_id', 'reviewer', name='uq_review_request_reviewer')
    )
    op.create_index('ix_review_requests_pr_github_id', 'review_requests', ['pr_github_id'])

    op.create_table(
        'conflict_analyses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('pr_number', sa.Integer(), nullable=False),
        sa.Column('owner', sa.String(200), nullable=False),
        sa.Column('repo', sa.String(200), nullable=False),
        sa.Column('conflicts_detected', sa.Boolean(), nullable=False),
        sa.Column('validation_form_posted', sa.Boolean(), nullable=False),
        sa.Column('analyzed_at', sa.TIMESTAMP(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_conflict_analyses_pr', 'conflict_analyses', ['owner', 'repo', 'pr_number', 'analyzed_at'])

    op.create_table(
        'conflict_feedback',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('pr_number', sa.Integer(), nullable=False),
        sa.Column('conflict_confirmed', sa.Boolean(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('owner', sa.String(200), nullable=True),
        sa.Column('repo', sa.String(200), nullable=True),
        sa.Column('reviewer', sa.String(200), nullable=True),
        sa.Column('recorded_at', sa.TIMESTAMP(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_conflict_feedback_pr', 'conflict_feedback', ['owner', 'repo', 'pr_number', 'recorded_at'])


def downgrade() -> None:
    """Revert migration changes."""
    op.drop_index('ix_conflict_feedback_pr', table_name='conflict_feedback')
    op.drop_table('conflict_feedback')
    op.drop_index('ix_conflict_analyses_pr', table_name='conflict_analyses')
    op.drop_table('conflict_analyses')
    op.drop_index('ix_review_requests_pr_github_id', table_name='review_requests')
    op.drop_table('review_requests')
    op.drop_index('ix_pull_requests_github_id', table_name='pull_requests')
    op.drop_table('pull_requests')
    op.drop_table('reviewer_frequency_summaries')
    op.drop_table('repositories')
    sa.Enum(name='prstate').drop(op.get_bind(), checkfirst=True)
