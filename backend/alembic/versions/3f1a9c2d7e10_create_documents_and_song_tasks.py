"""create_documents_and_song_tasks

Revision ID: 3f1a9c2d7e10
Revises:
Create Date: 2026-10-17 09:12:41.208113

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7e10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create documents and song_tasks tables."""
    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_user_id", "documents", ["user_id"])

    op.create_table(
        "song_tasks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("document_id", sa.Uuid(), nullable=False),
        sa.Column("external_task_id", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="preparing"),
        sa.Column("result_url", sa.Text(), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("prompt", sa.Text(), nullable=True),
        sa.Column("model", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "result_url IS NULL OR failure_reason IS NULL",
            name="ck_song_tasks_result_xor_failure",
        ),
    )
    op.create_index("ix_song_tasks_document_id", "song_tasks", ["document_id"])
    op.create_index(
        "ix_song_tasks_external_task_id", "song_tasks", ["external_task_id"], unique=True
    )
    op.create_index("ix_song_tasks_status", "song_tasks", ["status"])


def downgrade() -> None:
    """Drop song_tasks and documents tables."""
    op.drop_index("ix_song_tasks_status", table_name="song_tasks")
    op.drop_index("ix_song_tasks_external_task_id", table_name="song_tasks")
    op.drop_index("ix_song_tasks_document_id", table_name="song_tasks")
    op.drop_table("song_tasks")
    op.drop_index("ix_documents_user_id", table_name="documents")
    op.drop_table("documents")
