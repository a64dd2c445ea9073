"""
Shared fixtures: a deterministic reactor and a recording transport.
"""

from collections import deque
from typing import Any, Callable, List, Optional, Set, Tuple

import pytest

from framelink.reactor import TimerHandle
from framelink.transport import Transport


HOST_ORIGIN = "http://host.local"
FRAME_ORIGIN = "http://frame.local"


class ManualReactor:
    """Single queue driven by the test: nothing runs until run() or advance()."""

    def __init__(self):
        self.now = 0.0
        self.tasks: deque = deque()
        self.timers: List[TimerHandle] = []
        self.errors: List[BaseException] = []

    def post(self, fn: Callable[[], None]) -> None:
        self.tasks.append(fn)

    def call_later(self, delay: float, fn: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.now + max(0.0, delay), fn)
        self.timers.append(handle)
        return handle

    @property
    def pending_timers(self) -> List[TimerHandle]:
        return [h for h in self.timers if h.active]

    def run(self) -> None:
        while self.tasks:
            self._call(self.tasks.popleft())

    def advance(self, seconds: float) -> None:
        deadline = self.now + seconds
        while True:
            due = sorted((h for h in self.timers if h.active and h.when <= deadline),
                         key=lambda h: h.when)
            if not due:
                break
            handle = due[0]
            self.timers.remove(handle)
            self.now = handle.when
            handle.fired = True
            self._call(handle.fn)
            self.run()
        self.now = deadline
        self.run()

    def _call(self, fn) -> None:
        try:
            fn()
        except Exception as ex:
            self.errors.append(ex)


class FixedRandom:
    """rng stand-in whose uniform() always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def uniform(self, a: float, b: float) -> float:
        return self.value


class RecordingTransport(Transport):
    """Transport that records outbound payloads and lets tests inject inbound events."""

    def __init__(self, origin: str = HOST_ORIGIN):
        self._origin = origin
        self.sent: List[Tuple[Any, str, Any]] = []
        self.listeners: List[Callable] = []
        self.dead: Set[Any] = set()
        self.fail_for: Set[Any] = set()
        self.running = False

    @property
    def origin(self) -> str:
        return self._origin

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def send(self, payload, target_origin, via) -> None:
        if via in self.fail_for:
            raise ConnectionError(f"cannot reach {via}")
        self.sent.append((payload, target_origin, via))

    def on_message(self, cb) -> None:
        self.listeners.append(cb)

    def off_message(self, cb) -> None:
        self.listeners.remove(cb)

    def is_reachable(self, via) -> bool:
        return via is not None and via not in self.dead

    def deliver(self, payload, origin: str, reply: Optional[Any] = None) -> None:
        for cb in list(self.listeners):
            cb(payload, origin, reply)

    def payloads(self) -> List[Any]:
        return [p for p, _, _ in self.sent]


def syn(token: str, source: str, frame: int = 1) -> dict:
    return {"token": token, "source": source, "state": "SYN", "frame": frame}


def syn_ack(token: str, source: str, frame: int = 2) -> dict:
    return {"token": token, "source": source, "state": "SYN+ACK", "frame": frame}


def ack(token: str, source: str, frame: int = 3) -> dict:
    return {"token": token, "source": source, "state": "ACK", "frame": frame}


@pytest.fixture
def reactor():
    return ManualReactor()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def tokens(monkeypatch):
    """Make handshake tokens predictable: t1, t2, t3, ..."""
    counter = iter(range(1, 1000))
    monkeypatch.setattr("framelink.handshake.new_token", lambda: f"t{next(counter)}")
