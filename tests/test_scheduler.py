"""
Tests for autoreply/scheduler.py - the polling loop and its random pause.
"""

import random
from unittest.mock import Mock

import pytest

from autoreply.loop import ReplyLoop
from autoreply.models import CycleResult
from autoreply.scheduler import Scheduler

from conftest import FakeGateway, make_thread


def make_scheduler(loop=None, **kwargs):
    if loop is None:
        loop = Mock()
        loop.run_cycle.return_value = CycleResult()
    scheduler = Scheduler(loop, rng=random.Random(1234), **kwargs)
    scheduler.stop_event = Mock()
    scheduler.stop_event.is_set.return_value = False
    scheduler.stop_event.wait.return_value = False
    return scheduler


def test_delay_within_bounds_and_covers_range():
    scheduler = Scheduler(Mock(), rng=random.Random(42))
    samples = [scheduler.next_delay() for _ in range(5000)]

    assert min(samples) >= 75
    assert max(samples) <= 120
    assert all(isinstance(s, int) for s in samples)
    # Every whole second in the range is reachable, both ends included
    assert set(samples) == set(range(75, 121))


def test_delay_roughly_uniform():
    scheduler = Scheduler(Mock(), rng=random.Random(7))
    samples = [scheduler.next_delay() for _ in range(46000)]
    counts = {s: samples.count(s) for s in range(75, 121)}
    # Expected 1000 per bucket
    assert min(counts.values()) > 800
    assert max(counts.values()) < 1200


def test_inverted_range_rejected():
    with pytest.raises(ValueError):
        Scheduler(Mock(), min_delay=120, max_delay=75)


def test_bounded_run_sleeps_after_each_cycle():
    scheduler = make_scheduler()
    assert scheduler.run(max_cycles=3) == 3

    assert scheduler.loop.run_cycle.call_count == 3
    assert scheduler.stop_event.wait.call_count == 3
    for call in scheduler.stop_event.wait.call_args_list:
        assert 75 <= call.args[0] <= 120


def test_empty_cycle_still_sleeps():
    gateway = FakeGateway([])
    loop = Mock(wraps=ReplyLoop(gateway, Mock()))
    scheduler = make_scheduler(loop=loop)
    scheduler.run(max_cycles=1)

    assert gateway.sent == []
    scheduler.stop_event.wait.assert_called_once()


def test_stop_during_sleep_ends_run():
    scheduler = make_scheduler()
    scheduler.stop_event.wait.return_value = True

    assert scheduler.run() == 1
    assert scheduler.loop.run_cycle.call_count == 1


def test_stop_before_run_runs_nothing():
    scheduler = Scheduler(Mock())
    scheduler.stop()
    assert scheduler.run() == 0
    scheduler.loop.run_cycle.assert_not_called()


def test_aborted_cycle_does_not_stop_scheduler():
    loop = Mock()
    loop.run_cycle.side_effect = [CycleResult(error="boom"), CycleResult()]
    scheduler = make_scheduler(loop=loop)

    assert scheduler.run(max_cycles=2) == 2


def test_on_cycle_callback_receives_results(config, ledger):
    gateway = FakeGateway([make_thread("T1", "a@x.com")])
    results = []
    scheduler = make_scheduler(loop=ReplyLoop(gateway, ledger, config), on_cycle=results.append)
    scheduler.run(max_cycles=2)

    assert [r.replied_count for r in results] == [1, 0]
    assert len(gateway.sent) == 1


def test_real_event_wait_is_interrupted_by_stop():
    loop = Mock()
    scheduler = Scheduler(loop, min_delay=0, max_delay=0)

    def stop_after_first(*args, **kwargs):
        scheduler.stop()
        return CycleResult()

    loop.run_cycle.side_effect = stop_after_first
    assert scheduler.run() == 1
    assert scheduler.stopped
