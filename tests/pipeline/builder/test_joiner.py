"""Tests for the fail-fast parallel join."""

import asyncio

import pytest

from landscape.exceptions import BuildError, ExternalServiceError
from landscape.pipeline.builder import join_first_error


async def value_after(value, delay=0.0):
    await asyncio.sleep(delay)
    return value


async def fail_after(error, delay=0.0):
    await asyncio.sleep(delay)
    raise error


@pytest.mark.asyncio
async def test_both_results_returned_in_order():
    assert await join_first_error(value_after("a", 0.02), value_after("b")) == ("a", "b")


@pytest.mark.asyncio
async def test_first_failure_cancels_and_awaits_the_other():
    released = []

    async def slow():
        try:
            await asyncio.sleep(10)
        finally:
            released.append("slow")

    with pytest.raises(ExternalServiceError, match="crunchbase down"):
        await join_first_error(slow(), fail_after(ExternalServiceError("crunchbase down")))
    assert released == ["slow"]


@pytest.mark.asyncio
async def test_failure_of_first_argument():
    with pytest.raises(KeyError):
        await join_first_error(fail_after(KeyError("x")), value_after("b", 0.05))


@pytest.mark.asyncio
async def test_cancelled_operation_counts_as_failure():
    async def cancelled():
        raise asyncio.CancelledError()

    with pytest.raises(BuildError):
        await join_first_error(cancelled(), value_after("b", 0.05))


@pytest.mark.asyncio
async def test_caller_cancellation_cancels_both():
    cancelled = []

    async def wait_forever(name):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(name)
            raise

    task = asyncio.create_task(join_first_error(wait_forever("a"), wait_forever("b")))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert sorted(cancelled) == ["a", "b"]
