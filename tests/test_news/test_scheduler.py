import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from newsdesk.news.services.scheduler import IngestionScheduler


async def wait_for(condition, timeout=2.0):
    waited = 0.0
    while not condition():
        if waited >= timeout:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
        waited += 0.01


@pytest.mark.asyncio
async def test_trigger_runs_service_and_keeps_stats():
    service = MagicMock()
    service.run.return_value = {"stored": 3, "success": True}
    scheduler = IngestionScheduler(service, interval_minutes=30)

    stats = await scheduler.trigger()

    assert stats == {"stored": 3, "success": True}
    assert scheduler.last_stats == stats
    assert scheduler.busy is False


@pytest.mark.asyncio
async def test_overlapping_trigger_is_skipped():
    started = threading.Event()
    release = threading.Event()

    def slow_run():
        started.set()
        release.wait(5)
        return {"stored": 1}

    service = MagicMock()
    service.run.side_effect = slow_run
    scheduler = IngestionScheduler(service, interval_minutes=30)

    first = asyncio.create_task(scheduler.trigger())
    await asyncio.to_thread(started.wait, 5)

    assert scheduler.busy is True
    assert await scheduler.trigger() is None

    release.set()
    assert await first == {"stored": 1}
    assert service.run.call_count == 1


@pytest.mark.asyncio
async def test_start_runs_immediately_and_stop_cancels():
    service = MagicMock()
    service.run.return_value = {"stored": 0}
    scheduler = IngestionScheduler(service, interval_minutes=30, run_on_startup=True)

    scheduler.start()
    await wait_for(lambda: service.run.called)
    assert scheduler.running is True

    await scheduler.stop()
    assert scheduler.running is False
    assert service.run.call_count == 1


@pytest.mark.asyncio
async def test_start_without_startup_run_waits_for_interval():
    service = MagicMock()
    scheduler = IngestionScheduler(service, interval_minutes=30, run_on_startup=False)

    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    service.run.assert_not_called()


@pytest.mark.asyncio
async def test_loop_survives_failing_run():
    service = MagicMock()
    service.run.side_effect = RuntimeError("database unavailable")
    scheduler = IngestionScheduler(service, interval_minutes=30)

    scheduler.start()
    await wait_for(lambda: service.run.called)
    await asyncio.sleep(0.01)

    assert scheduler.running is True
    await scheduler.stop()
