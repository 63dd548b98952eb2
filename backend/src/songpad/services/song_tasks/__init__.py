"""Song task tracking: submission, webhook/poll reconciliation, refresh schedule."""

from songpad.services.song_tasks.polling import PollSchedule
from songpad.services.song_tasks.tracker import SongTaskTracker

__all__ = ["PollSchedule", "SongTaskTracker"]
