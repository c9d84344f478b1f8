import asyncio
import json
import logging

import pytest
from starlette.websockets import WebSocketState

from voice_relay.config.settings import RelaySettings

TEST_API_KEY = "AIzaTestKey1234567890"

_CLOSE = object()


class FakeUpstream:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self):
        self.sent = []
        self.close_calls = []
        self.close_code = None
        self.close_reason = None
        self._incoming = asyncio.Queue()

    @property
    def sent_frames(self):
        return [json.loads(frame) for frame in self.sent]

    def push(self, frame):
        """Queue a server frame (dict, or raw str/bytes)."""
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._incoming.put_nowait(frame)

    def drop(self, code=1006, reason=""):
        """Make the server side close the connection."""
        self._incoming.put_nowait((_CLOSE, code, reason))

    async def send(self, data):
        self.sent.append(data)

    async def close(self, code=1000, reason=""):
        self.close_calls.append(code)
        if self.close_code is None:
            self.close_code = code
            self.close_reason = reason
        self._incoming.put_nowait((_CLOSE, code, reason))

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._incoming.get()
        if isinstance(item, tuple) and item[0] is _CLOSE:
            if self.close_code is None:
                self.close_code = item[1]
                self.close_reason = item[2]
            raise StopAsyncIteration
        return item


class FakeConnector:
    """Replacement for websockets.connect handing out FakeUpstream sockets.

    `script` is an optional list consumed one entry per call: an exception
    instance is raised, a FakeUpstream is returned as-is.
    """

    def __init__(self, script=None):
        self.script = list(script or [])
        self.calls = []
        self.sockets = []

    async def __call__(self, url, **kwargs):
        self.calls.append(url)
        item = self.script.pop(0) if self.script else FakeUpstream()
        if isinstance(item, BaseException):
            raise item
        self.sockets.append(item)
        return item

    @property
    def open_sockets(self):
        return [ws for ws in self.sockets if ws.close_code is None]


class RecordingClient:
    """Browser-side WebSocket that records notifications."""

    def __init__(self):
        self.client_state = WebSocketState.CONNECTED
        self.messages = []

    async def send_text(self, data):
        self.messages.append(json.loads(data))

    def of_type(self, message_type):
        return [m for m in self.messages if m["type"] == message_type]


async def eventually(predicate, rounds=200):
    """Yield to the event loop until `predicate()` holds."""
    for _ in range(rounds):
        if predicate():
            return True
        await asyncio.sleep(0)
    return predicate()


async def flush(ws, rounds=20):
    """Let the session consume every frame queued on `ws`."""
    for _ in range(rounds):
        await asyncio.sleep(0)
        if ws._incoming.empty():
            break
    for _ in range(5):
        await asyncio.sleep(0)


async def settle(session, rounds=50):
    """Run the session's background tasks until only an idle receive loop is left."""
    for _ in range(rounds):
        await asyncio.sleep(0)
        pending = [
            task
            for task in (session._recv_task, session._reconnect_task)
            if task is not None and not task.done()
        ]
        if not pending:
            return
        done, _ = await asyncio.wait(pending, timeout=0.05)
        if not done and not session.reconnect_pending:
            return


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


@pytest.fixture
def settings():
    return RelaySettings(api_key=TEST_API_KEY, model="gemini-test-model")


@pytest.fixture
def client():
    return RecordingClient()


@pytest.fixture
def connector():
    return FakeConnector()
