from __future__ import annotations

import json

import pytest

from render_server.features.agent.relay import EventRelay
from render_server.features.agent.schemas import (
    CodeEvent,
    DoneEvent,
    ErrorEvent,
    MessageEvent,
    TextDeltaEvent,
    ToolCallArgDeltaEvent,
    encode_sse,
    stream_event_schema,
)


@pytest.mark.asyncio
async def test_relay_forwards_events_in_publish_order_until_done():
    relay = EventRelay()

    assert await relay.publish(TextDeltaEvent(content="Hel")) is True
    assert await relay.publish(TextDeltaEvent(content="lo")) is True
    assert await relay.publish(DoneEvent()) is True
    assert relay.closed is True
    assert await relay.publish(TextDeltaEvent(content="late")) is False

    received = [event async for event in relay.events()]

    assert [event.type for event in received] == ["text-delta", "text-delta", "done"]
    assert [getattr(event, "content", None) for event in received[:2]] == ["Hel", "lo"]


@pytest.mark.asyncio
async def test_error_event_closes_relay():
    relay = EventRelay()
    await relay.publish(ErrorEvent(error="model exploded"))

    assert await relay.publish(DoneEvent()) is False
    chunks = [chunk async for chunk in relay.sse()]

    assert chunks == ['event: error\ndata: {"type": "error", "error": "model exploded"}\n\n']


def test_encode_sse_uses_camel_case_and_drops_empty_fields():
    frame = encode_sse(
        ToolCallArgDeltaEvent(
            tool_call_id="call-1",
            tool_name="execute_code",
            arg_name="code",
            value='{"code": "x',
        )
    )

    header, data_line, _blank = frame.split("\n", 2)
    assert header == "event: tool-call-arg-delta"
    assert json.loads(data_line.removeprefix("data: ")) == {
        "type": "tool-call-arg-delta",
        "toolCallId": "call-1",
        "toolName": "execute_code",
        "argName": "code",
        "value": '{"code": "x',
    }
    assert frame.endswith("\n\n")

    message_frame = encode_sse(MessageEvent(role="assistant", content="Done."))
    payload = json.loads(message_frame.split("data: ", 1)[1])
    assert payload == {"type": "message", "role": "assistant", "content": "Done."}


def test_events_accept_snake_case_construction():
    event = CodeEvent(code="x = 1", tool_call_id="call-1")
    assert event.model_dump(by_alias=True)["toolCallId"] == "call-1"


def test_stream_event_schema_lists_every_event_type():
    schema = stream_event_schema()
    rendered = json.dumps(schema)

    for event_type in (
        "text-delta",
        "tool-call-arg-delta",
        "code",
        "notification",
        "artifact-url",
        "message",
        "done",
        "error",
    ):
        assert f'"{event_type}"' in rendered
    assert "toolCallId" in rendered


@pytest.mark.asyncio
async def test_fail_closes_relay_from_synchronous_code():
    relay = EventRelay()
    await relay.publish(TextDeltaEvent(content="partial"))

    assert relay.fail("producer exited") is True
    assert relay.fail("again") is False
    assert await relay.publish(DoneEvent()) is False

    received = [event async for event in relay.events()]
    assert [event.type for event in received] == ["text-delta", "error"]
    assert received[-1].error == "producer exited"
