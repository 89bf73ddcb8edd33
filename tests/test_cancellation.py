"""Unit tests for linkpreview.services.cancellation."""

import asyncio
import threading

import pytest

from linkpreview.services.cancellation import Cancellable


class TestCancellable:
    def test_starts_uncancelled(self):
        assert Cancellable().is_cancelled is False

    def test_cancel_sets_flag_for_good(self):
        cancellable = Cancellable()
        cancellable.cancel()
        cancellable.cancel()
        assert cancellable.is_cancelled is True

    @pytest.mark.asyncio
    async def test_cancel_aborts_attached_task(self):
        cancellable = Cancellable()
        task = asyncio.create_task(asyncio.sleep(10))
        cancellable.attach(task)

        cancellable.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert cancellable.task is task

    @pytest.mark.asyncio
    async def test_cancel_from_another_thread(self):
        cancellable = Cancellable()
        task = asyncio.create_task(asyncio.sleep(10))
        cancellable.attach(task)

        thread = threading.Thread(target=cancellable.cancel)
        thread.start()
        thread.join()

        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, 2.0)
        assert cancellable.is_cancelled

    @pytest.mark.asyncio
    async def test_finished_task_is_left_alone(self):
        cancellable = Cancellable()
        task = asyncio.create_task(asyncio.sleep(0, result="done"))
        cancellable.attach(task)
        await task

        cancellable.cancel()

        assert task.result() == "done"
        assert cancellable.is_cancelled
