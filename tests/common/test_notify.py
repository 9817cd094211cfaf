from __future__ import annotations

import asyncio

from vsdns.common.notify import ChangeNotifier


def test_notifications_coalesce_into_one_wake_up() -> None:
    async def run() -> None:
        notifier = ChangeNotifier()
        notifier()
        notifier()
        notifier()
        assert notifier.pending == 3

        assert await notifier.wait(timeout=1.0)
        assert notifier.pending == 0
        assert not await notifier.wait(timeout=0.01)

    asyncio.run(run())


def test_wait_times_out_without_notifications() -> None:
    async def run() -> bool:
        return await ChangeNotifier().wait(timeout=0.01)

    assert asyncio.run(run()) is False


def test_calls_from_other_threads_reach_the_loop() -> None:
    async def run() -> None:
        notifier = ChangeNotifier(loop=asyncio.get_running_loop())
        await asyncio.to_thread(notifier)

        assert await notifier.wait(timeout=1.0)

    asyncio.run(run())
