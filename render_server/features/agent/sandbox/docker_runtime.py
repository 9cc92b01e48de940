from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from render_server.core.config import get_settings
from render_server.features.agent.sandbox.sandbox_schema import ContainerSpec

logger = logging.getLogger(__name__)


class ContainerRuntimeError(RuntimeError):
    pass


class ContainerRuntime(Protocol):
    async def create(self, spec: ContainerSpec) -> str: ...

    async def start(self, container_id: str) -> None: ...

    async def wait(self, container_id: str) -> int: ...

    async def logs(self, container_id: str) -> tuple[str, str]: ...

    async def stop(self, container_id: str) -> None: ...

    async def remove(self, container_id: str) -> None: ...

    async def close(self) -> None: ...


def docker_create_command(docker_bin: str, spec: ContainerSpec) -> list[str]:
    return [
        docker_bin,
        "create",
        "--name",
        spec.name,
        "--network",
        "none",
        "--cap-drop",
        "ALL",
        "--security-opt",
        "no-new-privileges",
        "-v",
        f"{spec.workspace_dir}:{spec.mount_path}:rw",
        "--workdir",
        spec.working_dir,
        spec.image,
        *spec.command,
    ]


class DockerCliRuntime:
    """Container lifecycle driven through the docker CLI.

    Every call is a short-lived ``docker`` client process. Processes still
    running when the runtime is closed (for example a ``docker wait`` whose
    caller was cancelled) are killed.
    """

    def __init__(self, docker_bin: str | None = None):
        self._docker_bin = docker_bin or get_settings().render_docker_bin
        self._processes: set[asyncio.subprocess.Process] = set()
        self._closed = False

    async def _run(self, *args: str) -> tuple[int, str, str]:
        if self._closed:
            raise ContainerRuntimeError("Container runtime is closed.")
        process = await asyncio.create_subprocess_exec(
            self._docker_bin,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        self._processes.add(process)
        try:
            stdout, stderr = await process.communicate()
        finally:
            self._processes.discard(process)
        return (
            process.returncode or 0,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def _checked(self, action: str, *args: str) -> str:
        code, stdout, stderr = await self._run(*args)
        if code != 0:
            raise ContainerRuntimeError(f"docker {action} failed: {stderr.strip() or code}")
        return stdout

    async def create(self, spec: ContainerSpec) -> str:
        command = docker_create_command(self._docker_bin, spec)
        stdout = await self._checked("create", *command[1:])
        container_id = stdout.strip().splitlines()[-1] if stdout.strip() else ""
        if not container_id:
            raise ContainerRuntimeError("docker create did not return a container id.")
        return container_id

    async def start(self, container_id: str) -> None:
        await self._checked("start", "start", container_id)

    async def wait(self, container_id: str) -> int:
        stdout = await self._checked("wait", "wait", container_id)
        try:
            return int(stdout.strip().splitlines()[-1])
        except (IndexError, ValueError) as exc:
            raise ContainerRuntimeError(f"Unexpected docker wait output: {stdout!r}") from exc

    async def logs(self, container_id: str) -> tuple[str, str]:
        code, stdout, stderr = await self._run("logs", container_id)
        if code != 0:
            raise ContainerRuntimeError(f"docker logs failed: {stderr.strip() or code}")
        return stdout, stderr

    async def stop(self, container_id: str) -> None:
        await self._checked("stop", "stop", container_id)

    async def remove(self, container_id: str) -> None:
        await self._checked("rm", "rm", "-f", container_id)

    async def close(self) -> None:
        self._closed = True
        for process in list(self._processes):
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    continue
        self._processes.clear()


def build_container_runtime() -> ContainerRuntime:
    return DockerCliRuntime()
