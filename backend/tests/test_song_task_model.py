"""Unit tests for SongTask status application.

Covers the rules every update path relies on:
- status is always written
- result_url and failure_reason are mutually exclusive
- replaying a report changes nothing (including updated_at)
"""

from datetime import datetime
from uuid import uuid4

import pytest

from songpad.models.song_task import SongTask, SongTaskStatus


@pytest.fixture
def task() -> SongTask:
    stamp = datetime(2026, 1, 1, 12, 0, 0)
    return SongTask(
        document_id=uuid4(),
        external_task_id="abc123",
        status="preparing",
        created_at=stamp,
        updated_at=stamp,
    )


class TestSongTaskStatus:
    @pytest.mark.parametrize(
        "status", [SongTaskStatus.PREPARING, SongTaskStatus.QUEUED, SongTaskStatus.RUNNING]
    )
    def test_pending_statuses_are_not_terminal(self, status):
        assert status.is_terminal is False

    @pytest.mark.parametrize(
        "status",
        [
            SongTaskStatus.SUCCEEDED,
            SongTaskStatus.FAILED,
            SongTaskStatus.TIMED_OUT,
            SongTaskStatus.CANCELLED,
        ],
    )
    def test_finished_statuses_are_terminal(self, status):
        assert status.is_terminal is True

    def test_new_task_defaults_to_preparing(self):
        task = SongTask(document_id=uuid4(), external_task_id="t1")
        assert task.status == "preparing"
        assert task.is_terminal is False


class TestApplyStatus:
    def test_succeeded_with_url_sets_result(self, task):
        changed = task.apply_status(SongTaskStatus.SUCCEEDED, result_url="https://x/a.mp3")

        assert changed is True
        assert task.status == "succeeded"
        assert task.result_url == "https://x/a.mp3"
        assert task.failure_reason is None
        assert task.updated_at > task.created_at

    def test_succeeded_without_url_only_writes_status(self, task):
        task.apply_status(SongTaskStatus.SUCCEEDED)

        assert task.status == "succeeded"
        assert task.result_url is None

    def test_failed_with_reason_sets_reason(self, task):
        task.apply_status(SongTaskStatus.FAILED, failure_reason="content policy violation")

        assert task.status == "failed"
        assert task.failure_reason == "content policy violation"
        assert task.result_url is None

    def test_timed_out_records_reason(self, task):
        task.apply_status(SongTaskStatus.TIMED_OUT, failure_reason="took too long")

        assert task.status == "timed_out"
        assert task.failure_reason == "took too long"

    def test_url_ignored_for_non_success_status(self, task):
        task.apply_status(SongTaskStatus.RUNNING, result_url="https://x/early.mp3")

        assert task.status == "running"
        assert task.result_url is None

    def test_reason_ignored_for_cancelled(self, task):
        task.apply_status(SongTaskStatus.CANCELLED, failure_reason="user cancelled")

        assert task.status == "cancelled"
        assert task.failure_reason is None

    def test_failure_clears_previous_result(self, task):
        task.apply_status(SongTaskStatus.SUCCEEDED, result_url="https://x/a.mp3")
        task.apply_status(SongTaskStatus.FAILED, failure_reason="revoked")

        assert task.result_url is None
        assert task.failure_reason == "revoked"

    def test_success_clears_previous_failure(self, task):
        task.apply_status(SongTaskStatus.FAILED, failure_reason="flaky")
        task.apply_status(SongTaskStatus.SUCCEEDED, result_url="https://x/b.mp3")

        assert task.failure_reason is None
        assert task.result_url == "https://x/b.mp3"

    def test_replaying_same_report_is_a_no_op(self, task):
        task.apply_status(SongTaskStatus.SUCCEEDED, result_url="https://x/a.mp3")
        snapshot = task.model_dump()

        changed = task.apply_status(SongTaskStatus.SUCCEEDED, result_url="https://x/a.mp3")

        assert changed is False
        assert task.model_dump() == snapshot

    def test_unchanged_status_keeps_updated_at(self, task):
        before = task.updated_at

        changed = task.apply_status(SongTaskStatus.PREPARING)

        assert changed is False
        assert task.updated_at == before

    def test_terminal_status_can_be_overwritten(self, task):
        """Last write wins: a late pending report still moves the task back."""
        task.apply_status(SongTaskStatus.SUCCEEDED, result_url="https://x/a.mp3")

        changed = task.apply_status(SongTaskStatus.RUNNING)

        assert changed is True
        assert task.status == "running"
        assert task.result_url == "https://x/a.mp3"


class TestMarkQueryFailed:
    def test_uses_error_message(self, task):
        task.mark_query_failed(RuntimeError("connection reset"))

        assert task.status == "failed"
        assert task.failure_reason == "Status query failed: connection reset"
        assert task.result_url is None

    def test_falls_back_to_error_type(self, task):
        task.mark_query_failed(TimeoutError())

        assert task.failure_reason == "Status query failed: TimeoutError"
