"""CLI command for following a document's songs until they finish.

Re-reads the document's songs (which refreshes every pending one against the
synthesis API) on the backoff schedule until no song is pending.

Usage:
    python -m songpad.cli.watch_songs --user-id USER --document-id UUID [OPTIONS]

Examples:
    # Follow until every song is finished
    python -m songpad.cli.watch_songs --user-id user_123 --document-id 7b6f...

    # Stop after 10 refresh passes
    python -m songpad.cli.watch_songs --user-id user_123 --document-id 7b6f... --max-passes 10

    # Verbose logging
    python -m songpad.cli.watch_songs --user-id user_123 --document-id 7b6f... -v
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace
from typing import Awaitable, Callable, Optional
from uuid import UUID

import structlog

from songpad.core import timezone  # noqa: F401
from songpad.core.config import Settings, configure_logging
from songpad.core.database import setup_db_session
from songpad.models.song_task import SongTask, SongTaskStatus
from songpad.services.exceptions import ServiceError
from songpad.services.song_tasks.polling import PollSchedule
from songpad.services.song_tasks.tracker import SongTaskTracker
from songpad.services.synthesis.mureka_client import MurekaClient
from songpad.uow import create_uow_factory

logger = structlog.get_logger()


def parse_args(argv: Optional[list[str]] = None) -> Namespace:
    """Parse command-line arguments."""
    parser = ArgumentParser(
        description="Follow a document's song generation tasks until they finish",
    )

    parser.add_argument("--user-id", required=True, help="Owner of the document")
    parser.add_argument("--document-id", required=True, type=UUID, help="Document UUID")
    parser.add_argument(
        "--max-passes",
        type=int,
        help="Maximum number of refresh passes (default: unlimited)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser.parse_args(argv)


async def watch_document(
    tracker: SongTaskTracker,
    user_id: str,
    document_id: UUID,
    schedule: PollSchedule,
    max_passes: Optional[int] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> list[SongTask]:
    """Refresh a document's songs until none is pending.

    Args:
        tracker: Song task tracker
        user_id: Document owner
        document_id: Document to follow
        schedule: Delay schedule between passes
        max_passes: Stop after this many passes even if songs are pending
        sleep: Awaitable sleep (replaced in tests)

    Returns:
        Songs as of the last pass
    """
    passes = 0
    while True:
        tasks = await tracker.list_for_document(user_id, document_id)
        passes += 1

        delay = schedule.next_delay(tasks)
        logger.info(
            "watch.pass_completed",
            document_id=str(document_id),
            pass_number=passes,
            pending=sum(1 for t in tasks if not t.is_terminal),
            next_delay_seconds=delay,
        )

        if delay is None:
            return tasks
        if max_passes is not None and passes >= max_passes:
            logger.warning("watch.max_passes_reached", max_passes=max_passes)
            return tasks

        await sleep(delay)


def exit_code_for(tasks: list[SongTask]) -> int:
    """0 when every song succeeded, 2 when any song is pending or ended otherwise."""
    if all(t.status == SongTaskStatus.SUCCEEDED.value for t in tasks):
        return 0
    return 2


def print_summary(tasks: list[SongTask]) -> None:
    if not tasks:
        print("No songs for this document.")
        return

    print(f"{'SONG':36}  {'STATUS':10}  RESULT")
    for task in tasks:
        result = task.result_url or task.failure_reason or ""
        print(f"{str(task.id):36}  {task.status:10}  {result}")


async def async_main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point (async).

    Returns:
        Exit code: 0 (all succeeded), 1 (error), 2 (some songs did not succeed)
    """
    args = parse_args(argv)

    settings = Settings()  # type: ignore[call-arg]
    if args.verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)

    session_factory = setup_db_session(settings.database_url, pool_size=2)
    tracker = SongTaskTracker(
        create_uow_factory(session_factory),
        MurekaClient(
            api_key=settings.mureka_api_key,
            base_url=settings.mureka_api_base_url,
            timeout=settings.mureka_request_timeout_seconds,
        ),
        default_model=settings.default_song_model,
    )

    try:
        tasks = await watch_document(
            tracker,
            args.user_id,
            args.document_id,
            PollSchedule.from_settings(settings),
            max_passes=args.max_passes,
        )
    except ServiceError as e:
        logger.error("watch.failed", error=str(e), error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_summary(tasks)
    return exit_code_for(tasks)


def main(argv: Optional[list[str]] = None) -> int:
    """Synchronous wrapper for async_main."""
    return asyncio.run(async_main(argv))


if __name__ == "__main__":
    sys.exit(main())
