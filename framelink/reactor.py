from __future__ import annotations
import heapq, itertools, logging, threading, time
from queue import Queue, Empty
from typing import Callable, List, Optional, Protocol as TypingProtocol, Tuple

log = logging.getLogger(__name__)

Task = Callable[[], None]


class TimerHandle:
    __slots__ = ("when", "fn", "cancelled", "fired")

    def __init__(self, when: float, fn: Task):
        self.when = when
        self.fn = fn
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        # safe after firing; a queued-but-cancelled timer never runs
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class Scheduler(TypingProtocol):
    def post(self, fn: Task) -> None: ...
    def call_later(self, delay: float, fn: Task) -> TimerHandle: ...


def _log_error(exc: BaseException) -> None:
    log.error("reactor task failed", exc_info=exc)


class Reactor:
    """
    One logical execution queue: transport deliveries and timer firings are
    both posted here and run to completion on a single thread, one at a time.
    """

    def __init__(self, *, on_error: Optional[Callable[[BaseException], None]] = None,
                 clock: Callable[[], float] = time.monotonic, name: str = "framelink-reactor"):
        self.on_error = on_error or _log_error
        self.clock = clock
        self.name = name
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._tasks: "Queue[Optional[Task]]" = Queue()
        self._timers: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._lock = threading.Lock()

    # ---- scheduling ----
    def post(self, fn: Task) -> None:
        self._tasks.put(fn)

    def call_later(self, delay: float, fn: Task) -> TimerHandle:
        handle = TimerHandle(self.clock() + max(0.0, delay), fn)
        with self._lock:
            heapq.heappush(self._timers, (handle.when, next(self._seq), handle))
        self._tasks.put(None)  # wake the loop so it recomputes its timeout
        return handle

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self.thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self.thread.start()

    def stop(self) -> None:
        self.running = False
        self._tasks.put(None)
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1)

    # ---- loop ----
    def _loop(self) -> None:
        while self.running:
            try:
                fn = self._tasks.get(timeout=self._next_timeout())
            except Empty:
                fn = None
            if fn is not None:
                self._run(fn)
            for handle in self._due():
                if not handle.cancelled:
                    self._run(handle.fn)

    def _next_timeout(self) -> float:
        with self._lock:
            while self._timers and self._timers[0][2].cancelled:
                heapq.heappop(self._timers)
            if not self._timers:
                return 0.5
            return max(0.0, self._timers[0][0] - self.clock())

    def _due(self) -> List[TimerHandle]:
        now = self.clock()
        due: List[TimerHandle] = []
        with self._lock:
            while self._timers and self._timers[0][0] <= now:
                _, _, handle = heapq.heappop(self._timers)
                if handle.cancelled:
                    continue
                handle.fired = True
                due.append(handle)
        return due

    def _run(self, fn: Task) -> None:
        try:
            fn()
        except Exception as ex:
            self.on_error(ex)
