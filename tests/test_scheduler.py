from __future__ import annotations

import asyncio

from teamdraw.core.scheduler import AsyncioScheduler, ManualScheduler


def test_manual_scheduler_fires_in_due_order():
    scheduler = ManualScheduler()
    fired: list[str] = []
    scheduler.schedule(0.3, lambda: fired.append("c"))
    scheduler.schedule(0.1, lambda: fired.append("a"))
    scheduler.schedule(0.2, lambda: fired.append("b"))

    assert scheduler.advance(0.15) == 1
    assert fired == ["a"]
    assert scheduler.now() == 0.15
    assert scheduler.run_until_idle() == 2
    assert fired == ["a", "b", "c"]
    assert scheduler.pending == 0


def test_manual_scheduler_cancel_skips_callback():
    scheduler = ManualScheduler()
    fired: list[int] = []
    handle = scheduler.schedule(1.0, lambda: fired.append(1))
    handle.cancel()
    assert scheduler.pending == 0
    assert scheduler.advance(5.0) == 0
    assert fired == []


def test_manual_scheduler_runs_chained_callbacks():
    scheduler = ManualScheduler()
    seen: list[float] = []

    def step() -> None:
        seen.append(scheduler.now())
        if len(seen) < 3:
            scheduler.schedule(0.5, step)

    scheduler.schedule(0.0, step)
    scheduler.run_until_idle()
    assert seen == [0.0, 0.5, 1.0]


def test_asyncio_scheduler_uses_running_loop():
    async def scenario() -> list[str]:
        scheduler = AsyncioScheduler()
        fired: list[str] = []
        done = asyncio.Event()
        scheduler.schedule(0.01, lambda: (fired.append("x"), done.set()))
        cancelled = scheduler.schedule(0.0, lambda: fired.append("never"))
        cancelled.cancel()
        await asyncio.wait_for(done.wait(), timeout=2)
        return fired

    assert asyncio.run(scenario()) == ["x"]
