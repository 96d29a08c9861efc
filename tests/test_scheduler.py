"""Tests for the cooperative scheduler and its clocks."""

import pytest

from maze_race.scheduler import MonotonicClock, Scheduler, VirtualClock


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock)


class TestVirtualClock:

    def test_advance(self, clock):
        clock.advance(25)
        assert clock.now() == 25

    def test_cannot_go_backwards(self, clock):
        with pytest.raises(ValueError):
            clock.advance(-1)
        clock.advance_to(10)
        clock.advance_to(5)
        assert clock.now() == 10


class TestScheduler:

    def test_runs_in_due_order_then_queue_order(self, scheduler):
        ran = []
        scheduler.call_later(20, ran.append, "late")
        scheduler.call_later(0, ran.append, "first")
        scheduler.call_later(0, ran.append, "second")
        scheduler.run_until_idle()
        assert ran == ["first", "second", "late"]

    def test_run_due_only_runs_due_tasks(self, scheduler, clock):
        ran = []
        scheduler.call_later(0, ran.append, "now")
        scheduler.call_later(50, ran.append, "later")
        assert scheduler.run_due() == 1
        assert ran == ["now"]
        assert scheduler.pending == 1
        assert scheduler.next_due() == 50

        clock.advance(49)
        assert scheduler.run_due() == 0
        clock.advance(1)
        assert scheduler.run_due() == 1
        assert ran == ["now", "later"]

    def test_tasks_can_requeue_themselves(self, scheduler, clock):
        times = []

        def tick(n):
            times.append(clock.now())
            if n > 1:
                scheduler.call_later(50, tick, n - 1)

        scheduler.call_later(0, tick, 4)
        assert scheduler.run_until_idle() == 4
        assert times == [0, 50, 100, 150]

    def test_limit(self, scheduler):
        def forever():
            scheduler.call_later(10, forever)

        scheduler.call_later(0, forever)
        assert scheduler.run_until_idle(limit=5) == 5
        assert scheduler.pending == 1

    def test_negative_delay_is_treated_as_zero(self, scheduler):
        assert scheduler.call_later(-10, lambda: None) == 0

    def test_run_until_idle_needs_a_virtual_clock(self):
        scheduler = Scheduler(MonotonicClock())
        scheduler.call_later(0, lambda: None)
        with pytest.raises(TypeError):
            scheduler.run_until_idle()

    def test_clear(self, scheduler):
        scheduler.call_later(0, lambda: None)
        scheduler.clear()
        assert scheduler.pending == 0
        assert scheduler.next_due() is None
