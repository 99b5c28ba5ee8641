# Tests for the minute-tick reminder notifier

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from notifybot.datamodel import ReminderTask
from notifybot.errors import StoreError
from notifybot.storage.base import TaskStore
from notifybot.world.clock import Clock, SystemClock
from notifybot.world.notifier import ReminderNotifier

from conftest import RecordingTransport

DUE = datetime(2023, 11, 4, 8, 0)


class FakeClock(Clock):
    """Each wait advances one minute; stops the loop after ``ticks`` waits."""

    def __init__(self, start: datetime, ticks: int):
        self.current = start
        self.remaining = ticks

    def now(self) -> datetime:
        return self.current

    async def wait_until_next_tick(self, shutdown_event: asyncio.Event) -> None:
        if self.remaining == 0:
            shutdown_event.set()
            return
        self.remaining -= 1
        self.current += timedelta(minutes=1)


def _task(chat_id=1, message="Water the flowers", notify_time=DUE):
    return ReminderTask(chat_id=chat_id, message=message, notify_time=notify_time)


class TestTick:
    @pytest.mark.asyncio
    async def test_due_task_is_sent_and_deleted(self, store, transport):
        await store.save(_task())
        notifier = ReminderNotifier(store, transport)

        result = await notifier.tick(DUE)

        assert transport.sent == [(1, "Water the flowers")]
        assert await store.find_by_notify_time(DUE) == []
        assert (result.due, result.sent, result.failed) == (1, 1, 0)

    @pytest.mark.asyncio
    async def test_now_is_truncated_to_minute(self, store, transport):
        await store.save(_task())
        notifier = ReminderNotifier(store, transport)

        await notifier.tick(DUE + timedelta(seconds=37, microseconds=5))

        assert transport.sent == [(1, "Water the flowers")]

    @pytest.mark.asyncio
    async def test_missed_minute_is_not_delivered_later(self, store, transport):
        await store.save(_task())
        notifier = ReminderNotifier(store, transport)

        result = await notifier.tick(DUE + timedelta(minutes=1))

        assert result.due == 0
        assert transport.sent == []
        assert len(await store.find_by_notify_time(DUE)) == 1

    @pytest.mark.asyncio
    async def test_uses_clock_when_no_time_given(self, store, transport):
        await store.save(_task())
        notifier = ReminderNotifier(store, transport, clock=FakeClock(DUE, ticks=0))

        await notifier.tick()

        assert transport.sent == [(1, "Water the flowers")]

    @pytest.mark.asyncio
    async def test_second_tick_in_same_minute_sends_nothing(self, store, transport):
        await store.save(_task())
        notifier = ReminderNotifier(store, transport)

        await notifier.tick(DUE)
        await notifier.tick(DUE)

        assert len(transport.sent) == 1


class TestDeliveryFailures:
    @pytest.mark.asyncio
    async def test_failure_does_not_block_other_tasks(self, store):
        transport = RecordingTransport(failing={1})
        await store.save(_task(chat_id=1, message="to a blocked chat"))
        await store.save(_task(chat_id=2, message="to a good chat"))
        notifier = ReminderNotifier(store, transport, retry_delay=0)

        result = await notifier.tick(DUE)

        assert transport.sent == [(2, "to a good chat")]
        assert (result.due, result.sent, result.failed) == (2, 1, 1)

    @pytest.mark.asyncio
    async def test_failed_send_is_retried_once_then_deleted(self, store):
        transport = RecordingTransport(failing={1})
        await store.save(_task(chat_id=1))
        notifier = ReminderNotifier(store, transport, retry_delay=0)

        await notifier.tick(DUE)

        assert transport.attempts == [1, 1]
        assert await store.find_by_notify_time(DUE) == []

    @pytest.mark.asyncio
    async def test_retry_succeeds_after_transient_error(self, store):
        transport = RecordingTransport(failing={1})
        original_send = transport.send_message

        async def flaky_send(chat_id, text):
            try:
                await original_send(chat_id, text)
            finally:
                transport.failing.clear()

        transport.send_message = flaky_send
        await store.save(_task(chat_id=1))
        notifier = ReminderNotifier(store, transport, retry_delay=0)

        result = await notifier.tick(DUE)

        assert transport.sent == [(1, "Water the flowers")]
        assert result.sent == 1

    @pytest.mark.asyncio
    async def test_delete_failure_is_not_fatal(self, transport):
        store = AsyncMock(spec=TaskStore)
        store.find_by_notify_time.return_value = [
            _task(chat_id=1).with_id(10),
            _task(chat_id=2).with_id(11),
        ]
        store.delete.side_effect = StoreError("locked")
        notifier = ReminderNotifier(store, transport)

        result = await notifier.tick(DUE)

        assert result.sent == 2
        assert store.delete.await_count == 2


    @pytest.mark.asyncio
    async def test_unexpected_send_error_keeps_task(self, store):
        transport = RecordingTransport()
        transport.send_message = AsyncMock(side_effect=RuntimeError("bot not initialized"))
        await store.save(_task(chat_id=1))
        notifier = ReminderNotifier(store, transport, retry_delay=0)

        result = await notifier.tick(DUE)

        assert (result.due, result.sent, result.failed) == (1, 0, 1)
        assert len(await store.find_by_notify_time(DUE)) == 1


class TestConcurrentDelivery:
    @pytest.mark.asyncio
    async def test_slow_chat_does_not_block_others(self, store):
        other_recorded = asyncio.Event()
        sent = []

        class SlowTransport(RecordingTransport):
            async def send_message(self, chat_id, text):
                if chat_id == 1:
                    # only released once chat 2 has been delivered
                    await other_recorded.wait()
                sent.append(chat_id)
                if chat_id == 2:
                    other_recorded.set()

        await store.save(_task(chat_id=1, message="slow"))
        await store.save(_task(chat_id=2, message="fast"))
        notifier = ReminderNotifier(store, SlowTransport())

        result = await asyncio.wait_for(notifier.tick(DUE), timeout=2)

        assert sent == [2, 1]
        assert result.sent == 2
        assert await store.find_by_notify_time(DUE) == []


class TestMainLoop:
    @pytest.mark.asyncio
    async def test_loop_delivers_on_each_minute_and_stops(self, store, transport):
        await store.save(_task(message="first", notify_time=DUE))
        await store.save(_task(message="second", notify_time=DUE + timedelta(minutes=1)))
        clock = FakeClock(DUE - timedelta(minutes=1), ticks=3)
        notifier = ReminderNotifier(store, transport, clock=clock)
        shutdown_event = asyncio.Event()

        await asyncio.wait_for(notifier.main_loop(shutdown_event), timeout=5)

        assert [text for _, text in transport.sent] == ["first", "second"]
        assert notifier.get_status()["running"] is False

    @pytest.mark.asyncio
    async def test_store_error_does_not_stop_loop(self, transport):
        store = AsyncMock(spec=TaskStore)
        store.find_by_notify_time.side_effect = StoreError("db gone")
        notifier = ReminderNotifier(store, transport, clock=FakeClock(DUE, ticks=2))

        await asyncio.wait_for(notifier.main_loop(asyncio.Event()), timeout=5)

        assert store.find_by_notify_time.await_count == 2

    @pytest.mark.asyncio
    async def test_shutdown_before_first_tick(self, store, transport):
        shutdown_event = asyncio.Event()
        shutdown_event.set()
        notifier = ReminderNotifier(store, transport, clock=FakeClock(DUE, ticks=5))

        await notifier.main_loop(shutdown_event)

        assert notifier.get_status()["last_check_at"] is None


class TestSystemClock:
    def test_wait_is_within_one_minute(self):
        seconds = SystemClock().seconds_until_next_minute()
        assert 0.0 <= seconds <= 60.0

    @pytest.mark.asyncio
    async def test_wait_returns_on_shutdown(self):
        shutdown_event = asyncio.Event()
        shutdown_event.set()

        await asyncio.wait_for(SystemClock().wait_until_next_tick(shutdown_event), timeout=1)
