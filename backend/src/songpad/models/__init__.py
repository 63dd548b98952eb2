"""SQLModel database entities.

All models are imported here to ensure they're registered with SQLModel metadata
for Alembic autogenerate support.
"""

from songpad.models.document import Document
from songpad.models.song_task import (
    FAILURE_STATUSES,
    NON_TERMINAL_STATUSES,
    SongTask,
    SongTaskStatus,
)

__all__ = [
    "Document",
    "SongTask",
    "SongTaskStatus",
    "NON_TERMINAL_STATUSES",
    "FAILURE_STATUSES",
]
