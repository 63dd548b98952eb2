"""Refresh schedule for documents with pending song tasks.

Clients re-read a document's songs while any of them is still pending. The delay
grows with the age of the youngest pending task: a fresh task is checked every
base interval, and the interval doubles for every backoff step the task has been
waiting, up to the cap.

    delay = min(max_interval, base_interval * 2 ** floor(age / backoff_step))
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from songpad.core.timezone import utcnow
from songpad.models.song_task import SongTask


@dataclass(frozen=True)
class PollSchedule:
    base_interval: float = 5.0
    max_interval: float = 60.0
    backoff_step: float = 60.0

    @classmethod
    def from_settings(cls, settings) -> "PollSchedule":
        return cls(
            base_interval=settings.poll_base_interval_seconds,
            max_interval=settings.poll_max_interval_seconds,
            backoff_step=settings.poll_backoff_step_seconds,
        )

    def delay_for_age(self, age_seconds: float) -> float:
        age_seconds = max(0.0, age_seconds)
        if self.backoff_step <= 0:
            return min(self.max_interval, self.base_interval)
        # Exponent capped so huge ages cannot overflow the float
        exponent = min(int(age_seconds // self.backoff_step), 32)
        return min(self.max_interval, self.base_interval * (2**exponent))

    def next_delay(
        self, tasks: Iterable[SongTask], now: Optional[datetime] = None
    ) -> Optional[float]:
        """Seconds until the client should refresh, or None when nothing is pending."""
        pending = [task for task in tasks if not task.is_terminal]
        if not pending:
            return None

        now = now or utcnow()
        youngest = max(task.created_at for task in pending)
        return self.delay_for_age((now - youngest).total_seconds())
