from __future__ import annotations

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage

from .schemas import ChatMessage, MessagesRequest


def to_langchain_message(message: ChatMessage) -> BaseMessage:
    if message.role == "assistant":
        return AIMessage(content=message.content)
    if message.role == "tool":
        return ToolMessage(content=message.content, tool_call_id=message.tool_call_id or "")
    return HumanMessage(content=message.content)


def build_messages(payload: MessagesRequest) -> list[BaseMessage]:
    return [to_langchain_message(message) for message in payload.messages]
