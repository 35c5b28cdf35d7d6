import asyncio

import pytest

from questify.core.services.ticker import Ticker


def test_start_without_loop_is_disabled():
    ticker = Ticker(0.01, lambda: 1)
    assert ticker.start() is False
    assert not ticker.is_running()


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        Ticker(0, lambda: 1)


def test_failing_callback_does_not_stop_others():
    received = []
    ticker = Ticker(0.01, lambda: "tick")

    def broken(value):
        raise RuntimeError("boom")

    ticker.subscribe(broken)
    ticker.subscribe(received.append)
    ticker.emit()
    assert received == ["tick"]


async def test_unsubscribe_and_stop():
    received = []
    ticker = Ticker(0.005, lambda: "tick")
    unsubscribe = ticker.subscribe(received.append)
    assert ticker.start() is True

    await asyncio.sleep(0.03)
    unsubscribe()
    seen = len(received)
    await asyncio.sleep(0.02)
    ticker.stop()

    assert seen > 0
    assert len(received) == seen
    assert not ticker.is_running()
