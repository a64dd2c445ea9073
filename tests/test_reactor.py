"""
Tests for the threaded Reactor
==============================
"""

import threading

import pytest

from framelink import Reactor


@pytest.fixture
def running():
    reactor = Reactor()
    reactor.start()
    yield reactor
    reactor.stop()


class TestReactor:

    def test_tasks_run_in_order_on_one_thread(self, running):
        seen, threads = [], set()
        done = threading.Event()

        def task(i):
            seen.append(i)
            threads.add(threading.current_thread().name)
            if i == 9:
                done.set()

        for i in range(10):
            running.post(lambda i=i: task(i))

        assert done.wait(2)
        assert seen == list(range(10))
        assert threads == {running.name}

    def test_call_later_fires(self, running):
        fired = threading.Event()
        handle = running.call_later(0.05, fired.set)
        assert fired.wait(2)
        assert handle.fired

    def test_cancelled_timer_never_fires(self, running):
        fired = threading.Event()
        marker = threading.Event()
        handle = running.call_later(0.05, fired.set)
        handle.cancel()
        running.call_later(0.1, marker.set)

        assert marker.wait(2)
        assert not fired.is_set()
        assert not handle.active

    def test_failing_task_is_reported_and_loop_continues(self):
        errors = []
        done = threading.Event()
        reactor = Reactor(on_error=errors.append)
        reactor.start()
        try:
            reactor.post(lambda: 1 / 0)
            reactor.post(done.set)
            assert done.wait(2)
        finally:
            reactor.stop()

        assert len(errors) == 1
        assert isinstance(errors[0], ZeroDivisionError)

    def test_stop_from_inside_a_task(self):
        reactor = Reactor()
        reactor.start()
        reactor.post(reactor.stop)
        reactor.thread.join(2)
        assert not reactor.thread.is_alive()
