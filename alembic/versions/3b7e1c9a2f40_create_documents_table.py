"""create_documents_table

Revision ID: 3b7e1c9a2f40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '3b7e1c9a2f40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema - Add the documents table backing every collection."""
    op.create_table(
        'documents',
        sa.Column('collection_path', sa.String(length=512), nullable=False),
        sa.Column('doc_id', sa.String(length=255), nullable=False),
        sa.Column('collection_id', sa.String(length=128), nullable=False),
        sa.Column('data', sa.JSON().with_variant(JSONB(), 'postgresql'), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('collection_path', 'doc_id'),
    )
    op.create_index('ix_documents_collection_id', 'documents', ['collection_id'], unique=False)
    # Equality filters are pushed down as JSONB containment
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_documents_data_gin ON documents USING gin (data jsonb_path_ops)"
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("DROP INDEX IF EXISTS ix_documents_data_gin")
    op.drop_index('ix_documents_collection_id', table_name='documents')
    op.drop_table('documents')
