"""Tests for the bounded-concurrency mapper."""

import asyncio
from types import SimpleNamespace

import pytest

from landscape.pipeline.builder import bounded_map


def make_items(n: int):
    return [SimpleNamespace(id=f"item-{i}", value=i) for i in range(n)]


@pytest.mark.asyncio
async def test_in_flight_operations_never_exceed_concurrency():
    in_flight = 0
    peak = 0

    async def op(item):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return item.value * 2

    results = await bounded_map(make_items(12), op, 3)
    assert peak == 3
    assert results == {f"item-{i}": i * 2 for i in range(12)}


@pytest.mark.asyncio
async def test_failures_are_isolated():
    async def op(item):
        await asyncio.sleep(0)
        if item.value % 2:
            raise ValueError("odd")
        return item.value

    results = await bounded_map(make_items(6), op, 2)
    assert results == {
        "item-0": 0,
        "item-1": None,
        "item-2": 2,
        "item-3": None,
        "item-4": 4,
        "item-5": None,
    }


@pytest.mark.asyncio
async def test_cancelled_operation_records_none():
    async def op(item):
        if item.value == 1:
            raise asyncio.CancelledError()
        return item.value

    results = await bounded_map(make_items(3), op, 1)
    assert results == {"item-0": 0, "item-1": None, "item-2": 2}


@pytest.mark.asyncio
async def test_custom_key():
    async def op(item):
        return item

    results = await bounded_map(["a", "b"], op, 5, key=lambda s: s.upper())
    assert results == {"A": "a", "B": "b"}


@pytest.mark.asyncio
async def test_empty_input():
    async def op(item):
        raise AssertionError("not called")

    assert await bounded_map([], op, 1) == {}


@pytest.mark.asyncio
async def test_invalid_concurrency():
    async def op(item):
        return item

    with pytest.raises(ValueError):
        await bounded_map(make_items(1), op, 0)


@pytest.mark.asyncio
async def test_caller_cancellation_cancels_in_flight_operations():
    started = asyncio.Event()
    cancelled = []

    async def op(item):
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(item.id)
            raise

    task = asyncio.create_task(bounded_map(make_items(4), op, 2))
    await started.wait()
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0)
    assert sorted(cancelled) == ["item-0", "item-1"]
