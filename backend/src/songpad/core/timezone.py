"""UTC clock helpers.

Importing this module pins the process timezone to UTC. All persisted timestamps
are naive datetimes in UTC, matching the `timestamp without time zone` columns.
"""

import os
from datetime import datetime, timezone

os.environ["TZ"] = "UTC"


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
