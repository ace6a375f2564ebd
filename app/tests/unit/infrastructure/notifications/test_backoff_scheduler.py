"""Unit tests for the backoff scheduler."""

import threading
import time
from datetime import timedelta

import pytest

from infrastructure.notifications import BackoffScheduler
from infrastructure.notifications.models import utc_now
from infrastructure.notifications.scheduler import safe_run


@pytest.fixture
def scheduler():
    scheduler = BackoffScheduler(max_workers=2)
    scheduler.start()
    yield scheduler
    scheduler.stop(wait=True)


@pytest.mark.unit
class TestBackoffScheduler:
    def test_runs_task_after_delay(self, scheduler):
        done = threading.Event()
        started = time.monotonic()

        scheduler.schedule("a", 0.05, done.set)

        assert done.wait(2)
        assert time.monotonic() - started >= 0.04
        assert scheduler.pending_count() == 0

    def test_runs_in_due_order(self, scheduler):
        order = []
        finished = threading.Event()

        def record(name):
            def _task():
                order.append(name)
                if len(order) == 2:
                    finished.set()

            return _task

        scheduler.schedule("late", 0.15, record("late"))
        scheduler.schedule("early", 0.01, record("early"))

        assert finished.wait(2)
        assert order == ["early", "late"]

    def test_reschedule_replaces_pending_task(self, scheduler):
        calls = []
        done = threading.Event()

        scheduler.schedule("k", 0.05, lambda: calls.append("old"))
        scheduler.schedule("k", 0.05, lambda: (calls.append("new"), done.set()))

        assert done.wait(2)
        time.sleep(0.1)
        assert calls == ["new"]

    def test_reschedule_keeps_one_job_per_key(self, scheduler):
        scheduler.schedule("k", 60, lambda: None)
        scheduler.schedule("k", 30, lambda: None)

        assert scheduler.is_scheduled("k")
        assert scheduler.pending_count() == 1

    def test_cancel(self, scheduler):
        ran = threading.Event()
        scheduler.schedule("k", 0.05, ran.set)

        assert scheduler.cancel("k") is True
        assert scheduler.cancel("k") is False
        assert not ran.wait(0.2)

    def test_schedule_at_past_time_runs_immediately(self, scheduler):
        done = threading.Event()

        scheduler.schedule_at("k", utc_now() - timedelta(seconds=10), done.set)

        assert done.wait(1)

    def test_failing_task_does_not_stop_scheduler(self, scheduler):
        done = threading.Event()

        def boom():
            raise RuntimeError("task failed")

        scheduler.schedule("bad", 0, boom)
        scheduler.schedule("good", 0.02, done.set)

        assert done.wait(2)
        assert scheduler.is_running


@pytest.mark.unit
def test_stop_drops_pending_tasks():
    scheduler = BackoffScheduler(max_workers=1)
    scheduler.start()
    ran = threading.Event()
    scheduler.schedule("later", 60, ran.set)

    assert scheduler.is_scheduled("later")
    dropped = scheduler.stop(wait=True)

    assert dropped == 1
    assert not scheduler.is_running
    assert scheduler.pending_count() == 0
    assert not ran.is_set()


@pytest.mark.unit
def test_start_is_idempotent():
    scheduler = BackoffScheduler(max_workers=1)
    scheduler.start()
    scheduler.start()

    assert scheduler.is_running
    scheduler.stop()


@pytest.mark.unit
def test_safe_run_swallows_and_logs():
    def boom():
        raise ValueError("bad")

    safe_run("key", boom)


@pytest.mark.unit
def test_jobs_scheduled_before_start_run_once_started():
    scheduler = BackoffScheduler(max_workers=1)
    done = threading.Event()
    scheduler.schedule_at("early", utc_now() - timedelta(seconds=1), done.set)

    assert scheduler.is_scheduled("early")
    scheduler.start()
    try:
        assert done.wait(2)
    finally:
        scheduler.stop()
