"""Repository layer for SongPad backend.

Provides data access abstractions for all domain entities.
No base classes - each repository is self-contained.
"""

from songpad.repositories.document import DocumentRepository
from songpad.repositories.song_task import SongTaskRepository

__all__ = [
    "DocumentRepository",
    "SongTaskRepository",
]
