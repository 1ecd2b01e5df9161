"""Shared pytest fixtures for PocketPong tests."""

import json
import random

import pytest

from pong_core.state import create_initial_state
from pong_relay import SessionRelay, MessageReceived, Disconnected
from server_data import Session

JOIN_URL = "http://192.168.1.35:5174/controller.html"
QR_DATA = "data:image/svg+xml;base64,AAAA"


# =============================================================================
# Scheduling
# =============================================================================

class ManualHandle:

    def __init__(self, scheduler, callback, delay):
        self._scheduler = scheduler
        self.callback = callback
        self.delay = delay
        self.cancelled = False

    def cancel(self):
        self.cancelled = True
        if self in self._scheduler.pending:
            self._scheduler.pending.remove(self)


class ManualScheduler:
    """Frames only happen when a test asks for them."""

    def __init__(self):
        self.pending = []
        self.scheduled = []

    def schedule(self, callback, delay=None):
        handle = ManualHandle(self, callback, delay)
        self.pending.append(handle)
        self.scheduled.append(handle)
        return handle

    def run_next(self):
        handle = self.pending.pop(0)
        handle.callback()

    def run_frames(self, count):
        for _ in range(count):
            if not self.pending:
                return
            self.run_next()


class RecordingRenderer:

    def __init__(self):
        self.frames = 0

    def draw(self, game):
        self.frames += 1


class FakeDisplay:

    def __init__(self):
        self.renderers = []
        self.lobbies = []

    def table_renderer(self):
        renderer = RecordingRenderer()
        self.renderers.append(renderer)
        return renderer

    def show_lobby(self, status, url, show_qr):
        self.lobbies.append((status, url, show_qr))


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def display():
    return FakeDisplay()


@pytest.fixture
def rng():
    """Seeded so launch directions and AI thresholds repeat."""
    return random.Random(1234)


# =============================================================================
# Game state
# =============================================================================

@pytest.fixture
def game():
    """A fresh table with the round in progress."""
    state = create_initial_state()
    state.running = True
    return state


# =============================================================================
# Relay
# =============================================================================

class RelayHarness:
    """Feeds events to a SessionRelay and keeps the session between calls."""

    def __init__(self, relay: SessionRelay):
        self.relay = relay
        self.session = Session()

    def send(self, connection_id, packet):
        raw = packet if isinstance(packet, str) else json.dumps(packet)
        return self.relay.handle(self.session, MessageReceived(connection_id, raw))

    def disconnect(self, connection_id):
        return self.relay.handle(self.session, Disconnected(connection_id))


def packets_to(outbound, connection_id):
    return [item.packet for item in outbound if item.connection_id == connection_id]


def types_to(outbound, connection_id):
    return [packet["type"] for packet in packets_to(outbound, connection_id)]


@pytest.fixture
def relay():
    return SessionRelay(lambda origin: JOIN_URL, lambda url: QR_DATA)


@pytest.fixture
def harness(relay):
    return RelayHarness(relay)


@pytest.fixture
def with_screen(harness):
    """Relay with a screen registered as 'screen'."""
    harness.send("screen", {"type": "register_screen"})
    return harness
