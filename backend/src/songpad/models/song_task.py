"""SongTask entity - one song generation attempt tracked against the synthesis API."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Column, Text
from sqlmodel import Field, SQLModel

from songpad.core.timezone import utcnow


class SongTaskStatus(str, Enum):
    """Song generation status as reported by the synthesis API."""

    PREPARING = "preparing"
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self not in NON_TERMINAL_STATUSES


NON_TERMINAL_STATUSES = frozenset(
    {SongTaskStatus.PREPARING, SongTaskStatus.QUEUED, SongTaskStatus.RUNNING}
)
FAILURE_STATUSES = frozenset({SongTaskStatus.FAILED, SongTaskStatus.TIMED_OUT})


class SongTask(SQLModel, table=True):
    """SongTask links a document to an external song generation job.

    Status is mutated only through apply_status(), which keeps result_url and
    failure_reason mutually exclusive. external_task_id never changes after insert.
    """

    __tablename__ = "song_tasks"  # type: ignore[assignment]
    __table_args__ = (
        CheckConstraint(
            "result_url IS NULL OR failure_reason IS NULL",
            name="ck_song_tasks_result_xor_failure",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    document_id: UUID = Field(foreign_key="documents.id", ondelete="CASCADE", index=True)
    external_task_id: str = Field(max_length=255, unique=True, index=True)
    status: str = Field(default=SongTaskStatus.PREPARING.value, max_length=50, index=True)
    result_url: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    failure_reason: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    prompt: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    model: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def status_enum(self) -> SongTaskStatus:
        return SongTaskStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status_enum.is_terminal

    def apply_status(
        self,
        status: SongTaskStatus,
        result_url: Optional[str] = None,
        failure_reason: Optional[str] = None,
    ) -> bool:
        """Write a status report onto the task.

        The status is always written. The result URL is written only for
        succeeded reports that carry one, and the failure reason only for
        failed/timed_out reports that carry one. Writing either clears the other.

        updated_at moves only when a field actually changed, so replaying the
        same report leaves the row untouched.

        Args:
            status: Reported status
            result_url: Audio URL from the report, if any
            failure_reason: Failure reason from the report, if any

        Returns:
            True if any field changed, False otherwise
        """
        before = (self.status, self.result_url, self.failure_reason)

        self.status = status.value
        if status == SongTaskStatus.SUCCEEDED and result_url:
            self.result_url = result_url
            self.failure_reason = None
        elif status in FAILURE_STATUSES and failure_reason:
            self.failure_reason = failure_reason
            self.result_url = None

        changed = before != (self.status, self.result_url, self.failure_reason)
        if changed:
            self.updated_at = utcnow()
        return changed

    def mark_query_failed(self, error: Exception) -> bool:
        """Force the task to failed after its status could not be fetched.

        Args:
            error: Exception raised by the status query

        Returns:
            True if any field changed
        """
        detail = str(error) or type(error).__name__
        return self.apply_status(
            SongTaskStatus.FAILED, failure_reason=f"Status query failed: {detail}"
        )
