from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from langchain_core.messages import AIMessage, AIMessageChunk, ToolMessage

from render_server.core.config import get_settings
from render_server.features.agent.api.message_builders import build_messages
from render_server.features.agent.api.schemas import MessagesRequest
from render_server.features.agent.relay import EventRelay
from render_server.features.agent.runtime import split_ai_content
from render_server.features.agent.sandbox import EXECUTE_CODE_TOOL_NAME, bind_event_sink
from render_server.features.agent.schemas import (
    CodeEvent,
    DoneEvent,
    ErrorEvent,
    MessageEvent,
    TextDeltaEvent,
    ToolCallArgDeltaEvent,
)
from render_server.features.agent.service import build_agent
from render_server.features.agent.tool_args import CODE_ARG_NAME, ToolArgsAccumulator

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def get_agent() -> Any:
    return build_agent()


async def relay_message_chunk(
    relay: EventRelay,
    accumulator: ToolArgsAccumulator,
    token: AIMessageChunk,
) -> None:
    for chunk in token.tool_call_chunks:
        call_id, name = accumulator.resolve(
            call_id=chunk.get("id"),
            name=chunk.get("name"),
            index=chunk.get("index"),
        )
        fragment = chunk.get("args") or ""
        if name != EXECUTE_CODE_TOOL_NAME or not fragment:
            continue

        await relay.publish(
            ToolCallArgDeltaEvent(
                tool_call_id=call_id,
                tool_name=name,
                arg_name=CODE_ARG_NAME,
                value=fragment,
            )
        )
        code = accumulator.accept(call_id, fragment)
        if code is not None:
            await relay.publish(CodeEvent(code=code, tool_call_id=call_id))

    for text in split_ai_content(token):
        await relay.publish(TextDeltaEvent(content=text))


async def relay_update(
    relay: EventRelay,
    update: dict[str, Any],
    accumulator: ToolArgsAccumulator | None = None,
) -> None:
    for _node, node_update in update.items():
        if not isinstance(node_update, dict):
            continue
        for message in node_update.get("messages") or []:
            if isinstance(message, ToolMessage):
                content = message.content if isinstance(message.content, str) else str(message.content)
                await relay.publish(
                    MessageEvent(
                        role="tool",
                        content=content,
                        tool_call_id=message.tool_call_id,
                    )
                )
            elif isinstance(message, AIMessage):
                if accumulator is not None:
                    accumulator.next_turn()
                await relay.publish(
                    MessageEvent(
                        role="assistant",
                        content="".join(split_ai_content(message)),
                        tool_calls=[dict(call) for call in message.tool_calls],
                    )
                )


async def run_agent_stream(relay: EventRelay, messages: list[Any]) -> None:
    accumulator = ToolArgsAccumulator()
    try:
        settings = get_settings()
        agent = get_agent()
        with bind_event_sink(relay.publish):
            async for stream_mode, data in agent.astream(
                {"messages": messages},
                {"recursion_limit": settings.agent_recursion_limit},
                stream_mode=["messages", "updates"],
            ):
                if stream_mode == "messages":
                    token, _metadata = data
                    if isinstance(token, AIMessageChunk):
                        await relay_message_chunk(relay, accumulator, token)
                elif stream_mode == "updates":
                    await relay_update(relay, data, accumulator)
    except Exception as exc:
        logger.exception("Agent stream failed.")
        await relay.publish(ErrorEvent(error=str(exc) or type(exc).__name__))
        return

    await relay.publish(DoneEvent())


def _close_relay_on_exit(relay: EventRelay):
    def _callback(task: asyncio.Task[None]) -> None:
        if relay.closed:
            return
        if task.cancelled():
            reason = "Agent stream was cancelled."
        else:
            exc = task.exception()
            reason = (str(exc) or type(exc).__name__) if exc is not None else "Agent stream ended unexpectedly."
            logger.error("Agent stream exited without a terminal event.", exc_info=exc)
        relay.fail(reason)

    return _callback


async def stream_agent_response(payload: MessagesRequest) -> StreamingResponse:
    messages = build_messages(payload)
    if not messages:
        raise HTTPException(status_code=400, detail="Provide at least one message.")

    relay = EventRelay()

    async def _event_stream():
        producer_task = asyncio.create_task(run_agent_stream(relay, messages))
        producer_task.add_done_callback(_close_relay_on_exit(relay))
        try:
            async for chunk in relay.sse():
                yield chunk
        finally:
            if not producer_task.done():
                producer_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await producer_task

    return StreamingResponse(
        _event_stream(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
