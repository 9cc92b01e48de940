"""Agent render sandbox feature package."""

from render_server.features.agent.sandbox.docker_runtime import (
    ContainerRuntime,
    ContainerRuntimeError,
    DockerCliRuntime,
    build_container_runtime,
)
from render_server.features.agent.sandbox.event_bus import bind_event_sink, emit_event
from render_server.features.agent.sandbox.render_tool import (
    EXECUTE_CODE_TOOL_NAME,
    RENDER_TOOLS,
    execute_code,
)
from render_server.features.agent.sandbox.sandbox_executor import execute_render
from render_server.features.agent.sandbox.sandbox_schema import (
    ContainerSpec,
    RenderExecutionRequest,
    RenderExecutionResult,
    RenderRunStatus,
)
from render_server.features.agent.sandbox.source_utils import detect_scene_class

__all__ = [
    "ContainerRuntime",
    "ContainerRuntimeError",
    "ContainerSpec",
    "DockerCliRuntime",
    "EXECUTE_CODE_TOOL_NAME",
    "RENDER_TOOLS",
    "RenderExecutionRequest",
    "RenderExecutionResult",
    "RenderRunStatus",
    "bind_event_sink",
    "build_container_runtime",
    "detect_scene_class",
    "emit_event",
    "execute_code",
    "execute_render",
]
