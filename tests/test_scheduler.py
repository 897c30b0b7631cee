"""Tests for rollaball.core.scheduler – manual-clock delayed callbacks."""

from __future__ import annotations

from rollaball.core.scheduler import Scheduler


class TestCallLater:
    def test_not_run_before_due(self):
        scheduler = Scheduler()
        calls = []
        scheduler.call_later(2.0, lambda: calls.append(1))
        scheduler.advance(1.99)
        assert calls == []
        scheduler.advance(0.01)
        assert calls == [1]

    def test_runs_in_due_order(self):
        scheduler = Scheduler()
        order = []
        scheduler.call_later(3.0, lambda: order.append("c"))
        scheduler.call_later(1.0, lambda: order.append("a"))
        scheduler.call_later(2.0, lambda: order.append("b"))
        assert scheduler.advance(5.0) == 3
        assert order == ["a", "b", "c"]

    def test_same_due_keeps_registration_order(self):
        scheduler = Scheduler()
        order = []
        scheduler.call_later(1.0, lambda: order.append(1))
        scheduler.call_later(1.0, lambda: order.append(2))
        scheduler.advance(1.0)
        assert order == [1, 2]

    def test_negative_delay_runs_on_next_pass(self):
        scheduler = Scheduler()
        calls = []
        scheduler.call_later(-5, lambda: calls.append(1))
        scheduler.run_due()
        assert calls == [1]

    def test_task_state(self):
        scheduler = Scheduler()
        task = scheduler.call_later(1.0, lambda: None)
        assert task.active
        scheduler.advance(1.0)
        assert task.done
        assert not task.active

    def test_callback_scheduling_more_work(self):
        scheduler = Scheduler()
        calls = []
        scheduler.call_later(1.0, lambda: scheduler.call_later(0.0, lambda: calls.append("chained")))
        scheduler.advance(1.0)
        assert calls == ["chained"]


class TestClock:
    def test_advance_moves_now(self):
        scheduler = Scheduler(start=10.0)
        scheduler.advance(2.5)
        assert scheduler.now == 12.5

    def test_run_due_with_external_clock(self):
        scheduler = Scheduler()
        calls = []
        scheduler.call_later(1.0, lambda: calls.append(1))
        scheduler.run_due(now=1.5)
        assert calls == [1]
        assert scheduler.now == 1.5

    def test_clock_never_goes_back(self):
        scheduler = Scheduler(start=5.0)
        scheduler.run_due(now=1.0)
        assert scheduler.now == 5.0


class TestCancellation:
    def test_cancel_task(self):
        scheduler = Scheduler()
        calls = []
        task = scheduler.call_later(1.0, lambda: calls.append(1))
        task.cancel()
        assert scheduler.advance(2.0) == 0
        assert calls == []

    def test_cancel_owner(self):
        scheduler = Scheduler()
        owner, other = object(), object()
        calls = []
        scheduler.call_later(1.0, lambda: calls.append("mine"), owner=owner)
        scheduler.call_later(1.0, lambda: calls.append("mine2"), owner=owner)
        scheduler.call_later(1.0, lambda: calls.append("other"), owner=other)
        assert scheduler.cancel_owner(owner) == 2
        assert scheduler.pending == 1
        scheduler.advance(1.0)
        assert calls == ["other"]

    def test_clear(self):
        scheduler = Scheduler()
        task = scheduler.call_later(1.0, lambda: None)
        scheduler.clear()
        assert task.cancelled
        assert scheduler.pending == 0
