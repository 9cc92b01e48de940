from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from render_server.features.agent.api import streaming
from render_server.features.agent.api.schemas import MessagesRequest
from render_server.features.agent.schemas import stream_event_schema

router = APIRouter(prefix="/api/v1/messages", tags=["agent"])


@router.get("/stream/schema")
async def stream_schema() -> dict[str, Any]:
    return stream_event_schema()


@router.post("")
async def stream_messages(payload: MessagesRequest):
    return await streaming.stream_agent_response(payload)
