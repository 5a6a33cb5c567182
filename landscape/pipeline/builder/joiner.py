"""Parallel join of two operations that fails on the first error.

``join_first_error`` runs two awaitables concurrently and returns both
results. As soon as one of them fails, the other one is cancelled and awaited
(so it can release its resources) before the failure is raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from landscape.exceptions import BuildError

logger = logging.getLogger(__name__)

A = TypeVar("A")
B = TypeVar("B")


async def join_first_error(first: Awaitable[A], second: Awaitable[B]) -> tuple[A, B]:
    """Run ``first`` and ``second`` concurrently, failing fast.

    Returns
    -------
    tuple[A, B]
        Both results, once both operations succeeded.

    Raises
    ------
    Exception
        The first failure observed; the other operation is cancelled and its
        outcome discarded.
    BuildError
        If one of the operations ends cancelled without the caller being
        cancelled.
    asyncio.CancelledError
        If the caller is cancelled; both operations are cancelled too.
    """
    tasks = (asyncio.ensure_future(first), asyncio.ensure_future(second))
    pending = set(tasks)
    try:
        while pending:
            done, pending = await asyncio.wait(
                pending, return_when=asyncio.FIRST_COMPLETED
            )
            failed = next((t for t in tasks if t in done and _failed(t)), None)
            if failed is None:
                continue
            await _cancel_all(pending)
            if failed.cancelled():
                raise BuildError("Operation was cancelled before completing")
            raise failed.exception()
    except asyncio.CancelledError:
        await _cancel_all(set(tasks))
        raise
    return tasks[0].result(), tasks[1].result()


def _failed(task: asyncio.Future) -> bool:
    return task.cancelled() or task.exception() is not None


async def _cancel_all(tasks: set[asyncio.Future]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("Cancelled %d pending operation(s)", len(tasks))
