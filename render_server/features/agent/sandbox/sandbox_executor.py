from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

from render_server.core.config import get_settings
from render_server.features.agent.sandbox.docker_runtime import (
    ContainerRuntime,
    build_container_runtime,
)
from render_server.features.agent.sandbox.event_bus import emit_event
from render_server.features.agent.sandbox.sandbox_schema import (
    ContainerSpec,
    NotificationStatus,
    RenderExecutionRequest,
    RenderExecutionResult,
)
from render_server.features.agent.sandbox.source_utils import detect_scene_class
from render_server.features.agent.schemas import NotificationEvent
from render_server.features.shared.render_workspace import (
    SOURCE_FILENAME,
    find_rendered_video,
    prepare_workspace,
)

logger = logging.getLogger(__name__)

CONTAINER_MOUNT_PATH = "/manim"
_CONTAINER_NAME_PREFIX = "manim-"


def _trim_tail(value: str, *, limit: int) -> str:
    if limit <= 0 or len(value) <= limit:
        return value
    return f"...{value[-limit:]}"


def _combine_logs(stdout: str, stderr: str) -> str:
    return "\n".join(part for part in (stdout.rstrip("\n"), stderr.rstrip("\n")) if part)


async def _notify(content: str, status: NotificationStatus) -> None:
    await emit_event(NotificationEvent(content=content, id=str(uuid4()), status=status))


def render_command(scene_class: str) -> list[str]:
    settings = get_settings()
    return [
        "manim",
        f"-q{settings.render_quality}",
        "--disable_caching",
        "--flush_cache",
        SOURCE_FILENAME,
        scene_class,
    ]


def build_container_spec(request: RenderExecutionRequest, workspace_dir: Path) -> ContainerSpec:
    settings = get_settings()
    return ContainerSpec(
        name=f"{_CONTAINER_NAME_PREFIX}{request.request_id}",
        image=settings.render_docker_image,
        command=render_command(detect_scene_class(request.source_text)),
        workspace_dir=str(workspace_dir),
        mount_path=CONTAINER_MOUNT_PATH,
        working_dir=CONTAINER_MOUNT_PATH,
    )


class _ContainerLease:
    def __init__(self, runtime: ContainerRuntime):
        self.runtime = runtime
        self.container_id: str | None = None
        self.started = False
        self._released = False

    async def release(self) -> None:
        if self._released:
            return
        self._released = True

        if self.container_id is not None:
            if self.started:
                try:
                    await self.runtime.stop(self.container_id)
                except Exception:
                    logger.warning("Failed to stop render container %s.", self.container_id, exc_info=True)
            try:
                await self.runtime.remove(self.container_id)
            except Exception:
                logger.warning("Failed to remove render container %s.", self.container_id, exc_info=True)
        try:
            await self.runtime.close()
        except Exception:
            logger.warning("Failed to close container runtime.", exc_info=True)


@asynccontextmanager
async def _leased_container(runtime: ContainerRuntime):
    lease = _ContainerLease(runtime)
    try:
        yield lease
    finally:
        # Teardown must finish even if the surrounding task is being cancelled.
        await asyncio.shield(lease.release())


def _failed(
    request: RenderExecutionRequest,
    message: str,
    *,
    exit_status: int | None = None,
    combined_log: str = "",
) -> RenderExecutionResult:
    return RenderExecutionResult(
        request_id=request.request_id,
        status="failed",
        summary=message,
        exit_status=exit_status,
        combined_log=combined_log,
        error_message=message,
    )


async def _run_render(
    lease: _ContainerLease,
    request: RenderExecutionRequest,
) -> RenderExecutionResult:
    settings = get_settings()
    workspace_dir = prepare_workspace(request.request_id, request.source_text)
    spec = build_container_spec(request, workspace_dir)

    lease.container_id = await lease.runtime.create(spec)
    logger.info("Created render container %s for request %s.", lease.container_id, request.request_id)

    await _notify("Executing Manim code in Docker container", "running")
    await lease.runtime.start(lease.container_id)
    lease.started = True

    exit_status = await lease.runtime.wait(lease.container_id)
    stdout, stderr = await lease.runtime.logs(lease.container_id)
    combined_log = _trim_tail(_combine_logs(stdout, stderr), limit=settings.render_log_tail_chars)

    if exit_status != 0:
        message = f"Manim execution failed with exit code {exit_status}."
        await _notify("Manim code execution failed", "failed")
        return _failed(request, message, exit_status=exit_status, combined_log=combined_log)

    video_path = find_rendered_video(workspace_dir)
    if video_path is None:
        message = "Video file not found after execution."
        await _notify("Manim code execution failed", "failed")
        return _failed(request, message, exit_status=exit_status, combined_log=combined_log)

    await _notify("Manim code execution completed", "completed")
    return RenderExecutionResult(
        request_id=request.request_id,
        status="succeeded",
        summary="Manim code execution completed.",
        exit_status=exit_status,
        combined_log=combined_log,
        artifact_path=str(video_path),
    )


async def execute_render(
    source_text: str,
    *,
    runtime: ContainerRuntime | None = None,
) -> RenderExecutionResult:
    """Render ``source_text`` in a fresh container and report the outcome.

    Failures of any step come back as a ``failed`` result; only cancellation
    propagates. The container is stopped, removed and the runtime closed on
    every path.
    """
    request = RenderExecutionRequest(request_id=str(uuid4()), source_text=source_text)
    await _notify("Starting Manim code execution", "started")

    try:
        async with _leased_container(runtime or build_container_runtime()) as lease:
            return await _run_render(lease, request)
    except Exception as exc:
        logger.warning("Render request %s failed.", request.request_id, exc_info=True)
        await _notify("Manim code execution failed", "failed")
        return _failed(request, f"Render execution failed: {exc}")
