"""
Unit tests for the Gemini Live upstream session.

These tests drive GeminiLiveSession against an in-memory upstream socket and
a recording browser client, covering the handshake, frame translation, audio
forwarding, teardown and the reconnect policy.
"""

import asyncio

import pytest

from conftest import FakeConnector, FakeUpstream, RecordingClient, flush, settle
from voice_relay.bot.gemini_session import GeminiLiveSession
from voice_relay.config.settings import ConfigurationError, RelaySettings


@pytest.fixture
def session(settings, connector):
    return GeminiLiveSession(settings, connect_fn=connector, reconnect_delay=0)


async def open_ready(session, client, connector):
    """Connect and complete the setup handshake."""
    await session.connect(client)
    ws = connector.sockets[-1]
    ws.push({"setupComplete": {}})
    await flush(ws)
    return ws


@pytest.mark.asyncio
async def test_connect_sends_setup_once(session, client, connector):
    """The setup frame is the first and only frame sent after opening."""
    result = await session.connect(client)

    assert result is True
    ws = connector.sockets[0]
    frames = ws.sent_frames
    assert len(frames) == 1
    setup = frames[0]["setup"]
    assert setup["model"] == "models/gemini-test-model"
    assert setup["generation_config"]["response_modalities"] == ["AUDIO"]
    assert setup["generation_config"]["temperature"] == 0.7
    assert setup["generation_config"]["max_output_tokens"] == 1024
    voice = setup["generation_config"]["speech_config"]["voice_config"]
    assert voice["prebuilt_voice_config"]["voice_name"] == "Aoede"
    assert "Revolt Motors" in setup["system_instruction"]["parts"][0]["text"]
    assert session.connected is False

    await session.disconnect()


@pytest.mark.asyncio
async def test_connect_uses_api_key_in_url(session, client, connector, settings):
    await session.connect(client)

    assert connector.calls[0].endswith(f"?key={settings.api_key}")
    assert "BidiGenerateContent" in connector.calls[0]

    await session.disconnect()


@pytest.mark.asyncio
@pytest.mark.parametrize("api_key", [None, "", "sk-not-gemini"])
async def test_connect_rejects_bad_api_key(api_key, client, connector):
    """Configuration errors are raised before any socket is opened."""
    session = GeminiLiveSession(RelaySettings(api_key=api_key), connect_fn=connector)

    with pytest.raises(ConfigurationError):
        await session.connect(client)

    assert connector.calls == []
    assert session.ws is None


@pytest.mark.asyncio
async def test_setup_complete_emits_single_ready(session, client, connector):
    ws = await open_ready(session, client, connector)

    assert client.of_type("ready") == [
        {"type": "ready", "message": "AI assistant is ready to chat!"}
    ]
    assert session.connected is True
    assert ws.close_calls == []

    await session.disconnect()


@pytest.mark.asyncio
async def test_snake_case_setup_complete_is_accepted(session, client, connector):
    await session.connect(client)
    ws = connector.sockets[0]
    ws.push({"setup_complete": {}})
    await flush(ws)

    assert len(client.of_type("ready")) == 1

    await session.disconnect()


@pytest.mark.asyncio
async def test_audio_parts_forwarded_verbatim(session, client, connector):
    ws = await open_ready(session, client, connector)

    ws.push({
        "serverContent": {
            "modelTurn": {
                "parts": [
                    {"inlineData": {"mimeType": "audio/pcm;rate=24000", "data": "UklGRg=="}},
                    {"text": "hello"},
                    {"inline_data": {"mime_type": "audio/pcm", "data": "AAAA"}},
                    {"inline_data": {"mime_type": "image/png", "data": "iVBOR"}},
                ]
            }
        }
    })
    await flush(ws)

    assert client.of_type("audio") == [
        {"type": "audio", "data": "UklGRg=="},
        {"type": "audio", "data": "AAAA"},
    ]
    assert client.of_type("turn_complete") == []

    await session.disconnect()


@pytest.mark.asyncio
async def test_turn_complete_and_interrupted_are_independent(session, client, connector):
    ws = await open_ready(session, client, connector)

    ws.push({"serverContent": {"interrupted": True}})
    await flush(ws)
    assert len(client.of_type("interrupted")) == 1
    assert client.of_type("turn_complete") == []

    ws.push({"server_content": {"turn_complete": True, "interrupted": True}})
    await flush(ws)
    assert len(client.of_type("interrupted")) == 2
    assert len(client.of_type("turn_complete")) == 1

    await session.disconnect()


@pytest.mark.asyncio
async def test_notifications_preserve_frame_order(session, client, connector):
    ws = await open_ready(session, client, connector)

    ws.push({"serverContent": {"modelTurn": {"parts": [
        {"inlineData": {"mimeType": "audio/pcm", "data": "one"}}]}}})
    ws.push({"serverContent": {"modelTurn": {"parts": [
        {"inlineData": {"mimeType": "audio/pcm", "data": "two"}}]}, "turnComplete": True}})
    await flush(ws)

    assert [m["type"] for m in client.messages] == ["ready", "audio", "audio", "turn_complete"]
    assert [m.get("data") for m in client.of_type("audio")] == ["one", "two"]

    await session.disconnect()


@pytest.mark.asyncio
async def test_error_frame_is_reported(session, client, connector):
    ws = await open_ready(session, client, connector)

    ws.push({"error": {"code": 400, "message": "bad request"}})
    ws.push({"error": {}})
    ws.push({"error": "quota exhausted"})
    await flush(ws)

    assert [m["message"] for m in client.of_type("error")] == [
        "AI Error: bad request",
        "AI Error: Unknown error",
        "AI Error: quota exhausted",
    ]

    await session.disconnect()


@pytest.mark.asyncio
async def test_unparseable_frame_keeps_session_open(session, client, connector):
    ws = await open_ready(session, client, connector)

    ws.push("this is not json")
    ws.push(b'{"serverContent": {"turnComplete": true}}')
    await flush(ws)

    assert client.of_type("error") == [
        {"type": "error", "message": "Failed to parse AI response"}
    ]
    assert len(client.of_type("turn_complete")) == 1
    assert session.connected is True
    assert ws.close_calls == []

    await session.disconnect()


@pytest.mark.asyncio
async def test_send_audio_wraps_one_complete_turn(session, client, connector):
    ws = await open_ready(session, client, connector)

    result = await session.send_audio("AAAA")

    assert result is True
    frames = ws.sent_frames
    assert "setup" in frames[0]
    assert len(frames) == 2
    turn = frames[1]["client_content"]
    assert turn["turn_complete"] is True
    assert len(turn["turns"]) == 1
    assert turn["turns"][0]["role"] == "user"
    assert turn["turns"][0]["parts"] == [
        {"inline_data": {"mime_type": "audio/webm", "data": "AAAA"}}
    ]

    await session.disconnect()


@pytest.mark.asyncio
async def test_send_audio_before_handshake_is_rejected(session, client, connector):
    await session.connect(client)
    ws = connector.sockets[0]

    result = await session.send_audio("AAAA")

    assert result is False
    assert len(ws.sent) == 1  # setup only
    assert client.of_type("error") == [
        {"type": "error", "message": "Not connected to AI service"}
    ]

    await session.disconnect()


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ["", None])
async def test_send_audio_empty_payload_never_sent(payload, session, client, connector):
    ws = await open_ready(session, client, connector)

    result = await session.send_audio(payload)

    assert result is False
    assert len(ws.sent) == 1
    assert client.of_type("error") == [
        {"type": "error", "message": "No audio data received"}
    ]

    await session.disconnect()


@pytest.mark.asyncio
async def test_send_audio_failure_is_reported(session, client, connector):
    ws = await open_ready(session, client, connector)

    async def broken_send(data):
        raise ConnectionError("socket gone")

    ws.send = broken_send
    result = await session.send_audio("AAAA")

    assert result is False
    assert client.of_type("error")[-1]["message"] == "Failed to send audio to AI"

    await session.disconnect()


@pytest.mark.asyncio
async def test_disconnect_is_idempotent(session, client, connector):
    ws = await open_ready(session, client, connector)
    sent_before = len(client.messages)

    await session.disconnect()
    await session.disconnect()

    assert ws.close_calls == [1000]
    assert session.connected is False
    assert session.ws is None
    assert len(client.messages) == sent_before


@pytest.mark.asyncio
async def test_normal_close_does_not_reconnect(session, client, connector):
    ws = await open_ready(session, client, connector)

    ws.drop(code=1000, reason="bye")
    await settle(session)

    assert len(connector.calls) == 1
    assert session.connected is False
    assert client.of_type("error") == []


@pytest.mark.asyncio
async def test_abnormal_close_reconnects_with_same_client(session, client, connector):
    ws = await open_ready(session, client, connector)

    ws.drop(code=1006)
    await settle(session)

    assert len(connector.calls) == 2
    assert session.reconnect_attempts == 1
    assert session.client is client
    new_ws = connector.sockets[1]
    assert "setup" in new_ws.sent_frames[0]

    new_ws.push({"setupComplete": {}})
    await flush(new_ws)

    assert session.reconnect_attempts == 0
    assert len(client.of_type("ready")) == 2
    assert client.of_type("error") == []

    await session.disconnect()


@pytest.mark.asyncio
async def test_three_abnormal_closes_emit_single_terminal_error(settings, client):
    sockets = [FakeUpstream() for _ in range(3)]
    for ws in sockets:
        ws.drop(code=1006, reason="")
    connector = FakeConnector(script=list(sockets))
    session = GeminiLiveSession(settings, connect_fn=connector, reconnect_delay=0)

    await session.connect(client)
    await settle(session)

    assert len(connector.calls) == 3
    assert client.messages == [{"type": "error", "message": "Connection closed: 1006"}]
    assert session.failed is True
    assert session.connected is False
    assert session.reconnect_pending is False


@pytest.mark.asyncio
async def test_terminal_error_names_code_and_reason(settings, client):
    sockets = [FakeUpstream() for _ in range(3)]
    for ws in sockets:
        ws.drop(code=1011, reason="internal error")
    session = GeminiLiveSession(
        settings, connect_fn=FakeConnector(script=sockets), reconnect_delay=0
    )

    await session.connect(client)
    await settle(session)

    assert client.of_type("error") == [
        {"type": "error", "message": "Connection closed: 1011 internal error"}
    ]


@pytest.mark.asyncio
async def test_only_one_upstream_socket_open_at_a_time(settings, client):
    connector = FakeConnector()
    session = GeminiLiveSession(settings, connect_fn=connector, reconnect_delay=0)

    await session.connect(client)
    await session.connect(client)

    assert len(connector.sockets) == 2
    assert connector.sockets[0].close_calls == [1000]
    assert len(connector.open_sockets) == 1

    connector.sockets[1].drop(code=1006)
    await settle(session)

    assert len(connector.sockets) == 3
    assert len(connector.open_sockets) == 1

    await session.disconnect()
    assert connector.open_sockets == []


@pytest.mark.asyncio
async def test_disconnect_cancels_pending_reconnect(settings, client):
    connector = FakeConnector()
    session = GeminiLiveSession(settings, connect_fn=connector, reconnect_delay=60)

    await session.connect(client)
    connector.sockets[0].drop(code=1006)
    await flush(connector.sockets[0])
    await asyncio.wait_for(session._recv_task, timeout=1)

    assert session.reconnect_pending is True

    await session.disconnect()

    assert session.reconnect_pending is False
    assert len(connector.calls) == 1
    assert client.messages == []


@pytest.mark.asyncio
async def test_transport_error_on_open_is_classified(settings, client):
    connector = FakeConnector(script=[
        Exception("server rejected WebSocket connection: HTTP 401"),
        FakeUpstream(),
    ])
    session = GeminiLiveSession(settings, connect_fn=connector, reconnect_delay=0)

    result = await session.connect(client)
    await settle(session)

    assert result is False
    assert client.of_type("error") == [
        {"type": "error", "message": "Invalid API key - check your GEMINI_API_KEY"}
    ]
    # A failed open counts as an abnormal close and is retried
    assert len(connector.calls) == 2
    assert session.ws is connector.sockets[0]

    await session.disconnect()


@pytest.mark.asyncio
async def test_notifications_skipped_after_client_disconnects(session, connector):
    from starlette.websockets import WebSocketState

    client = RecordingClient()
    ws = await open_ready(session, client, connector)
    client.client_state = WebSocketState.DISCONNECTED

    ws.push({"serverContent": {"turnComplete": True}})
    await flush(ws)

    assert client.of_type("turn_complete") == []

    await session.disconnect()
