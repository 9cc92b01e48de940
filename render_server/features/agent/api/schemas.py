from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "tool"]
    content: str
    tool_call_id: str | None = None


class MessagesRequest(BaseModel):
    messages: list[ChatMessage] = Field(default_factory=list)
