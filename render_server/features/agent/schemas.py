from __future__ import annotations

import json
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TextDeltaEvent(_WireModel):
    type: Literal["text-delta"] = "text-delta"
    content: str


class ToolCallArgDeltaEvent(_WireModel):
    type: Literal["tool-call-arg-delta"] = "tool-call-arg-delta"
    tool_call_id: str
    tool_name: str
    arg_name: str
    value: str


class CodeEvent(_WireModel):
    type: Literal["code"] = "code"
    code: str
    tool_call_id: str


class NotificationEvent(_WireModel):
    type: Literal["notification"] = "notification"
    content: str
    id: str
    status: Literal["started", "running", "completed", "failed"]


class ArtifactUrlEvent(_WireModel):
    type: Literal["artifact-url"] = "artifact-url"
    url: str
    tool_call_id: str


class MessageEvent(_WireModel):
    type: Literal["message"] = "message"
    role: Literal["assistant", "tool"]
    content: str
    tool_calls: list[dict[str, Any]] | None = None
    tool_call_id: str | None = None


class DoneEvent(_WireModel):
    type: Literal["done"] = "done"
    message: str = "Stream completed"


class ErrorEvent(_WireModel):
    type: Literal["error"] = "error"
    error: str


StreamEvent = Union[
    TextDeltaEvent,
    ToolCallArgDeltaEvent,
    CodeEvent,
    NotificationEvent,
    ArtifactUrlEvent,
    MessageEvent,
    DoneEvent,
    ErrorEvent,
]

TERMINAL_EVENT_TYPES = frozenset({"done", "error"})

_STREAM_EVENT_ADAPTER = TypeAdapter(StreamEvent)


def stream_event_schema() -> dict[str, Any]:
    return _STREAM_EVENT_ADAPTER.json_schema(by_alias=True)


def is_terminal(event: StreamEvent) -> bool:
    return event.type in TERMINAL_EVENT_TYPES


def encode_sse(event: StreamEvent) -> str:
    payload = event.model_dump(mode="json", by_alias=True, exclude_none=True)
    event_name = payload["type"]
    return f"event: {event_name}\ndata: {json.dumps(payload, ensure_ascii=True)}\n\n"
