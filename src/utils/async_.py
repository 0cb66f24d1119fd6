from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

log = logging.getLogger(__name__)


def raise_task_exception(task: asyncio.Task):
    try:
        if e := task.exception():
            raise e
    except asyncio.CancelledError:
        pass


def spawn(coro: Coroutine[Any, Any, Any], tasks: set[asyncio.Task]) -> asyncio.Task:
    """Schedule coro on the running loop, holding a reference in tasks until it finishes.

    Raises RuntimeError if there is no running event loop.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        raise
    task = loop.create_task(coro)
    tasks.add(task)
    task.add_done_callback(tasks.discard)
    task.add_done_callback(raise_task_exception)
    return task
