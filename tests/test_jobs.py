"""Unit tests for the in-memory job store.

WHY: The job store is the central state manager for the HTTP API. Race
conditions, missing cleanup, or incorrect status transitions would cause
stale jobs, leaked temp dirs, or broken polling.

HOW: Tests are organized by class, one per JobStore method or concern:
  - TestJobCreation: create_job basics, defaults, and the job limit
  - TestJobRetrieval: get_job and list_jobs
  - TestJobUpdate: status transitions, summaries, terminal states
  - TestJobDeletion: delete and work dir cleanup
  - TestTTLCleanup: expiry logic and boundary conditions
  - TestThreadSafety: concurrent access doesn't corrupt state

RULES:
- Each test creates its own JobStore instance (no shared mutable state)
- Work directories are removed by the store or explicitly in tests
- Time-dependent tests use monkeypatch to control time.time()
"""

from __future__ import annotations

import shutil
import threading
import time

import pytest

from gemini_transcript.server.jobs import (
    DEFAULT_TTL_SECONDS,
    JOB_DIR_PREFIX,
    JobStatus,
    JobStore,
)


@pytest.fixture
def store():
    store = JobStore()
    yield store
    for job in store.list_jobs():
        store.delete_job(job.id)


def _freeze_time(monkeypatch, value: float) -> None:
    monkeypatch.setattr(time, "time", lambda: value)


# ---------------------------------------------------------------------------
# TestJobCreation
# ---------------------------------------------------------------------------


class TestJobCreation:

    def test_creates_pending_job(self, store):
        job = store.create_job("lecture.mp4")
        assert job.status == JobStatus.PENDING
        assert job.source == "lecture.mp4"
        assert len(job.id) == 32

    def test_unique_ids(self, store):
        assert store.create_job("a.mp4").id != store.create_job("b.mp4").id

    def test_creates_work_dir(self, store):
        job = store.create_job("lecture.mp4")
        assert job.work_dir.is_dir()
        assert job.work_dir.name.startswith(JOB_DIR_PREFIX)

    def test_timestamps(self, store, monkeypatch):
        _freeze_time(monkeypatch, 1000.0)
        job = store.create_job("lecture.mp4")
        assert job.created_at == 1000.0
        assert job.updated_at == 1000.0
        assert job.completed_at is None

    def test_config_stored(self, store):
        job = store.create_job("lecture.mp4", {"language": "English"})
        assert job.config == {"language": "English"}

    def test_defaults(self, store):
        job = store.create_job("lecture.mp4")
        assert job.config == {}
        assert job.summary == {}
        assert job.output_files == []
        assert job.error is None

    def test_job_limit(self):
        store = JobStore(max_jobs=2)
        try:
            store.create_job("a.mp4")
            store.create_job("b.mp4")
            with pytest.raises(ValueError, match="Maximum number of concurrent jobs"):
                store.create_job("c.mp4")
            assert len(store) == 2
        finally:
            for job in store.list_jobs():
                store.delete_job(job.id)


# ---------------------------------------------------------------------------
# TestJobRetrieval
# ---------------------------------------------------------------------------


class TestJobRetrieval:

    def test_get_existing(self, store):
        job = store.create_job("lecture.mp4")
        assert store.get_job(job.id) is job

    def test_get_missing_returns_none(self, store):
        assert store.get_job("does-not-exist") is None

    def test_list_empty(self, store):
        assert store.list_jobs() == []

    def test_list_ordered_by_creation(self, store, monkeypatch):
        _freeze_time(monkeypatch, 200.0)
        later = store.create_job("later.mp4")
        _freeze_time(monkeypatch, 100.0)
        earlier = store.create_job("earlier.mp4")
        assert [j.id for j in store.list_jobs()] == [earlier.id, later.id]


# ---------------------------------------------------------------------------
# TestJobUpdate
# ---------------------------------------------------------------------------


class TestJobUpdate:

    def test_status_moves_through_stages(self, store):
        job = store.create_job("https://videos.test/a.mp4")
        for status in (JobStatus.DOWNLOADING, JobStatus.TRANSCRIBING, JobStatus.RENDERING):
            store.update_job(job.id, status=status)
            assert store.get_job(job.id).status == status
            assert store.get_job(job.id).completed_at is None

    def test_bumps_updated_at(self, store, monkeypatch):
        _freeze_time(monkeypatch, 100.0)
        job = store.create_job("lecture.mp4")
        _freeze_time(monkeypatch, 150.0)
        store.update_job(job.id, status=JobStatus.TRANSCRIBING)
        assert job.updated_at == 150.0
        assert job.created_at == 100.0

    def test_summary_and_output_files(self, store):
        job = store.create_job("lecture.mp4")
        store.update_job(
            job.id,
            status=JobStatus.COMPLETED,
            summary={"segments": 5},
            output_files=["lecture_transcript.srt"],
        )
        assert job.summary == {"segments": 5}
        assert job.output_files == ["lecture_transcript.srt"]

    def test_missing_job_returns_none(self, store):
        assert store.update_job("nope", status=JobStatus.FAILED) is None

    @pytest.mark.parametrize("status", [JobStatus.COMPLETED, JobStatus.FAILED])
    def test_terminal_sets_completed_at(self, store, monkeypatch, status):
        job = store.create_job("lecture.mp4")
        _freeze_time(monkeypatch, 500.0)
        store.update_job(job.id, status=status)
        assert job.completed_at == 500.0

    def test_completed_at_set_once(self, store, monkeypatch):
        job = store.create_job("lecture.mp4")
        _freeze_time(monkeypatch, 500.0)
        store.update_job(job.id, status=JobStatus.FAILED)
        _freeze_time(monkeypatch, 900.0)
        store.update_job(job.id, error="late detail")
        assert job.completed_at == 500.0
        assert job.error == "late detail"

    def test_only_non_none_fields_updated(self, store):
        job = store.create_job("lecture.mp4")
        store.update_job(job.id, status=JobStatus.FAILED, error="boom")
        store.update_job(job.id, summary={"x": 1})
        assert job.status == JobStatus.FAILED
        assert job.error == "boom"


# ---------------------------------------------------------------------------
# TestJobDeletion
# ---------------------------------------------------------------------------


class TestJobDeletion:

    def test_delete_removes_job_and_dir(self, store):
        job = store.create_job("lecture.mp4")
        (job.work_dir / "lecture.mp4").write_bytes(b"video")

        assert store.delete_job(job.id) is True
        assert store.get_job(job.id) is None
        assert not job.work_dir.exists()

    def test_delete_missing_returns_false(self, store):
        assert store.delete_job("nope") is False

    def test_delete_with_dir_already_gone(self, store):
        job = store.create_job("lecture.mp4")
        shutil.rmtree(job.work_dir)
        assert store.delete_job(job.id) is True


# ---------------------------------------------------------------------------
# TestTTLCleanup
# ---------------------------------------------------------------------------


class TestTTLCleanup:

    def test_removes_expired_terminal_jobs(self, monkeypatch):
        store = JobStore(ttl_seconds=60)
        _freeze_time(monkeypatch, 1000.0)
        done = store.create_job("done.mp4")
        failed = store.create_job("failed.mp4")
        store.update_job(done.id, status=JobStatus.COMPLETED)
        store.update_job(failed.id, status=JobStatus.FAILED)

        _freeze_time(monkeypatch, 1061.0)
        assert store.cleanup_expired() == 2
        assert len(store) == 0
        assert not done.work_dir.exists()
        assert not failed.work_dir.exists()

    def test_keeps_recent_jobs(self, monkeypatch):
        store = JobStore(ttl_seconds=60)
        _freeze_time(monkeypatch, 1000.0)
        job = store.create_job("done.mp4")
        store.update_job(job.id, status=JobStatus.COMPLETED)

        _freeze_time(monkeypatch, 1060.0)
        assert store.cleanup_expired() == 0
        assert store.get_job(job.id) is job
        store.delete_job(job.id)

    def test_ignores_in_progress_jobs(self, monkeypatch):
        store = JobStore(ttl_seconds=60)
        _freeze_time(monkeypatch, 1000.0)
        job = store.create_job("busy.mp4")
        store.update_job(job.id, status=JobStatus.TRANSCRIBING)

        _freeze_time(monkeypatch, 99999.0)
        assert store.cleanup_expired() == 0
        store.delete_job(job.id)

    def test_empty_store(self, store):
        assert store.cleanup_expired() == 0

    def test_default_ttl_is_one_hour(self):
        assert DEFAULT_TTL_SECONDS == 3600


# ---------------------------------------------------------------------------
# TestThreadSafety
# ---------------------------------------------------------------------------


class TestThreadSafety:

    def test_concurrent_creates(self, store):
        ids = []
        lock = threading.Lock()

        def worker():
            for _ in range(10):
                job = store.create_job("lecture.mp4")
                with lock:
                    ids.append(job.id)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 50
        assert len(set(ids)) == 50
        assert len(store) == 50

    def test_concurrent_updates(self, store):
        job = store.create_job("lecture.mp4")
        stages = [JobStatus.DOWNLOADING, JobStatus.TRANSCRIBING, JobStatus.RENDERING]

        def worker(status):
            for _ in range(50):
                store.update_job(job.id, status=status)

        threads = [threading.Thread(target=worker, args=(s,)) for s in stages]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get_job(job.id).status in stages
        assert store.get_job(job.id).completed_at is None


class TestJobStatusEnum:

    def test_values(self):
        assert [s.value for s in JobStatus] == [
            "pending", "downloading", "transcribing", "rendering", "completed", "failed",
        ]

    def test_string_comparison(self):
        assert JobStatus.COMPLETED == "completed"

    def test_is_terminal(self):
        assert JobStatus.COMPLETED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert not JobStatus.RENDERING.is_terminal
