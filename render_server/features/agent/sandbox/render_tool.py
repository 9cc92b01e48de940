from __future__ import annotations

from typing import Annotated

from langchain.tools import tool
from langchain_core.tools import InjectedToolCallId

from render_server.core.config import get_settings
from render_server.features.agent.prompts import EXECUTE_CODE_TOOL_DESCRIPTION
from render_server.features.agent.sandbox.event_bus import emit_event
from render_server.features.agent.sandbox.sandbox_executor import execute_render
from render_server.features.agent.sandbox.sandbox_schema import RenderExecutionResult
from render_server.features.agent.schemas import ArtifactUrlEvent

EXECUTE_CODE_TOOL_NAME = "execute_code"


def artifact_url(request_id: str, filename: str) -> str:
    base_url = get_settings().public_base_url.rstrip("/")
    return f"{base_url}/api/videos/{request_id}/{filename}"


def format_failure(result: RenderExecutionResult) -> str:
    reason = result.error_message or result.summary
    if result.combined_log:
        reason = f"{reason} Logs: {result.combined_log}"
    return f"Error executing Manim code: {reason}\n\nPlease review the code and fix any issues."


@tool(EXECUTE_CODE_TOOL_NAME, description=EXECUTE_CODE_TOOL_DESCRIPTION)
async def execute_code(
    code: str,
    tool_call_id: Annotated[str, InjectedToolCallId],
) -> str:
    result = await execute_render(code)
    filename = result.artifact_filename
    if result.status != "succeeded" or filename is None:
        return format_failure(result)

    url = artifact_url(result.request_id, filename)
    await emit_event(ArtifactUrlEvent(url=url, tool_call_id=tool_call_id))
    return url


RENDER_TOOLS = [execute_code]
