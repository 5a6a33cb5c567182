"""Bounded-concurrency mapping of an asynchronous operation over items.

``bounded_map`` runs one operation per item, each in its own task, with at
most ``concurrency`` of them in flight at any time. Failures are isolated: an
operation that raises (or whose task ends cancelled) is logged and recorded
as ``None`` for its item, and the remaining items are still processed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Hashable, Iterable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _item_id(item: Any) -> Hashable:
    return item.id


async def bounded_map(
    items: Iterable[T],
    op: Callable[[T], Coroutine[Any, Any, R]],
    concurrency: int,
    *,
    key: Callable[[T], Hashable] = _item_id,
) -> dict[Hashable, R | None]:
    """Apply ``op`` to every item with at most ``concurrency`` calls in flight.

    Parameters
    ----------
    items : Iterable[T]
        Items to process.
    op : Callable[[T], Coroutine]
        Asynchronous operation applied to each item.
    concurrency : int
        Maximum number of operations in flight.
    key : Callable[[T], Hashable], optional
        Identity of an item in the result (``item.id`` by default).

    Returns
    -------
    dict[Hashable, R | None]
        Outcome per item key, ``None`` for the items whose operation failed.
        Returned only once every operation has finished; iterate the original
        items to restore their order.

    Raises
    ------
    ValueError
        If ``concurrency`` is lower than 1.
    asyncio.CancelledError
        If the caller is cancelled; in-flight operations are cancelled too.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")
    semaphore = asyncio.Semaphore(concurrency)

    async def run_one(item: T) -> R | None:
        async with semaphore:
            task = asyncio.create_task(op(item))
            try:
                await asyncio.wait({task})
            except asyncio.CancelledError:
                task.cancel()
                raise
        if task.cancelled():
            logger.warning("Operation for %s was cancelled", key(item))
            return None
        error = task.exception()
        if error is not None:
            logger.warning("Operation for %s failed: %s", key(item), error)
            return None
        return task.result()

    items = list(items)
    results = await asyncio.gather(*(asyncio.create_task(run_one(i)) for i in items))
    return {key(item): result for item, result in zip(items, results)}
