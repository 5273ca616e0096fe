"""Create shared_exams table

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'shared_exams',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('data', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # Sweep: DELETE WHERE expires_at <= now
    op.create_index('ix_shared_exams_expires_at', 'shared_exams', ['expires_at'])


def downgrade():
    op.drop_index('ix_shared_exams_expires_at', table_name='shared_exams')
    op.drop_table('shared_exams')
