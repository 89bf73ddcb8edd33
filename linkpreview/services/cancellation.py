"""Cancellation handle shared by every step of one preview operation."""

from __future__ import annotations

import asyncio


class Cancellable:
    """Cooperative cancellation flag.

    One instance is created per ``preview()`` call and passed by reference to
    each stage. Stages check :attr:`is_cancelled` before every hand-off and
    stop silently once it is set. The flag is never reset.

    When a task is attached, :meth:`cancel` also cancels it so an in-flight
    HTTP request is aborted instead of running to completion.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._task: asyncio.Task | None = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        task = self._task
        if task is not None and not task.done():
            # Task.cancel is not thread-safe; route through the task's loop
            loop = task.get_loop()
            if loop.is_closed():
                return
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                task.cancel()
            else:
                loop.call_soon_threadsafe(task.cancel)

    def attach(self, task: asyncio.Task) -> None:
        self._task = task

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def __repr__(self) -> str:
        return f"<Cancellable cancelled={self._cancelled}>"
