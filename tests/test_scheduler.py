"""Tests for the periodic retention scheduler."""
import asyncio
import os
import time

import pytest

from pdf_service.retention import RetentionScheduler, RetentionSweeper


def _old_file(directory, name="old.pdf", age_seconds=3600):
    path = directory / name
    path.write_bytes(b"x")
    ts = time.time() - age_seconds
    os.utime(path, (ts, ts))
    return path


def test_interval_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        RetentionScheduler(RetentionSweeper([tmp_path]), retention_minutes=30, interval_seconds=0)


@pytest.mark.asyncio
async def test_run_once_sweeps_in_a_thread(tmp_path):
    old = _old_file(tmp_path)
    scheduler = RetentionScheduler(RetentionSweeper([tmp_path]), retention_minutes=30)

    report = await scheduler.run_once()

    assert report.deleted_count == 1
    assert not old.exists()


@pytest.mark.asyncio
async def test_start_runs_sweeps_on_interval_until_stopped(tmp_path):
    scheduler = RetentionScheduler(RetentionSweeper([tmp_path]), retention_minutes=30, interval_seconds=0.05)
    await scheduler.start()
    assert scheduler.running
    try:
        old = _old_file(tmp_path)
        for _ in range(100):
            if not old.exists():
                break
            await asyncio.sleep(0.05)
        assert not old.exists()
    finally:
        await scheduler.stop()

    assert not scheduler.running
    survivor = _old_file(tmp_path, "later.pdf")
    await asyncio.sleep(0.2)
    assert survivor.exists()


@pytest.mark.asyncio
async def test_start_is_idempotent_and_stop_without_start_is_safe(tmp_path):
    scheduler = RetentionScheduler(RetentionSweeper([tmp_path]), retention_minutes=30, interval_seconds=60)
    await scheduler.stop()
    await scheduler.start()
    first = scheduler._task
    await scheduler.start()
    assert scheduler._task is first
    await scheduler.stop()
    assert not scheduler.running


@pytest.mark.asyncio
async def test_failing_sweep_does_not_kill_the_schedule(tmp_path):
    calls = []

    class FlakySweeper:
        def sweep(self, retention_minutes):
            calls.append(retention_minutes)
            if len(calls) == 1:
                raise RuntimeError("disk on fire")
            return None

    scheduler = RetentionScheduler(FlakySweeper(), retention_minutes=5, interval_seconds=0.02)
    await scheduler.start()
    try:
        for _ in range(100):
            if len(calls) >= 2:
                break
            await asyncio.sleep(0.02)
    finally:
        await scheduler.stop()

    assert len(calls) >= 2
    assert calls[0] == 5
