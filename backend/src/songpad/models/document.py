"""Document entity - lyrics written by a user, owner of song tasks."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from songpad.core.timezone import utcnow


class Document(SQLModel, table=True):
    """Document holds the plain-text lyrics a song is generated from."""

    __tablename__ = "documents"  # type: ignore[assignment]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: str = Field(max_length=255, index=True)  # identity provider user id
    title: str = Field(max_length=255)
    content: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id
