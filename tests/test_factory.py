"""
Tests for the FrameLink factory, end to end on real threads
===========================================================
"""

import threading
import time

import pytest

from framelink import (
    ConfigurationError,
    FrameLink,
    MemoryTransport,
    RetryConfig,
    Role,
    ServiceConfig,
)

from conftest import FRAME_ORIGIN, HOST_ORIGIN


def wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


FAST = RetryConfig(window_s=0.1, floor_s=0.01)


class TestFactory:

    def test_memory_label_builds_a_window(self, reactor):
        service = FrameLink(FRAME_ORIGIN, transport="memory", origin=HOST_ORIGIN,
                            reactor=reactor)
        assert isinstance(service.t, MemoryTransport)
        assert service.t.origin == HOST_ORIGIN
        assert service.role is Role.RESPONDER

    def test_frame_window_is_resolved_to_its_address(self, reactor):
        frame_window = MemoryTransport(FRAME_ORIGIN)
        service = FrameLink(FRAME_ORIGIN, transport="memory", origin=HOST_ORIGIN,
                            frame=frame_window, reactor=reactor)
        assert service.frame is frame_window.address
        assert service.role is Role.INITIATOR

    def test_string_frame_needs_address_of(self, reactor):
        with pytest.raises(ValueError):
            FrameLink(FRAME_ORIGIN, transport="memory", origin=HOST_ORIGIN,
                      frame="frame-window", reactor=reactor)

    def test_config_supplies_defaults(self, reactor):
        config = ServiceConfig(target_origin=FRAME_ORIGIN, identity="host",
                               codec="msgpack", retry=FAST)
        service = FrameLink(config=config, origin=HOST_ORIGIN, reactor=reactor)

        assert service.target == FRAME_ORIGIN
        assert service.identity == "host"
        assert service.t.codec.name == "msgpack"
        assert service.handshake.retry_window_s == 0.1

    def test_wildcard_in_config_is_rejected(self, reactor):
        with pytest.raises(ConfigurationError):
            FrameLink(config=ServiceConfig(target_origin="*"), origin=HOST_ORIGIN,
                      reactor=reactor)

    def test_unknown_transport_label(self, reactor):
        with pytest.raises(ValueError):
            FrameLink(FRAME_ORIGIN, transport="carrier-pigeon", reactor=reactor)


class TestEndToEnd:
    """Host and frame each on their own Reactor thread."""

    def test_handshake_and_messages(self):
        frame_window = MemoryTransport(FRAME_ORIGIN)
        frame = FrameLink(config=ServiceConfig(target_origin=HOST_ORIGIN, retry=FAST),
                          transport=frame_window, identity="B")
        host = FrameLink(config=ServiceConfig(target_origin=FRAME_ORIGIN, retry=FAST),
                         origin=HOST_ORIGIN, frame=frame_window, identity="A")
        try:
            assert wait_for(lambda: host.is_connected and frame.is_connected)

            received = []
            got_it = threading.Event()
            frame.add_handler(lambda data: (received.append(data), got_it.set()))

            host.post_message({"x": 1})
            assert got_it.wait(2)
            assert received == [{"x": 1}]
            assert host.channels[0].destination == "B"
            assert frame.channels[0].destination == "A"
        finally:
            host.close()
            frame.close()
