from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

RenderRunStatus = Literal["succeeded", "failed"]
NotificationStatus = Literal["started", "running", "completed", "failed"]


class RenderExecutionRequest(BaseModel):
    request_id: str
    source_text: str


class RenderExecutionResult(BaseModel):
    request_id: str
    status: RenderRunStatus
    summary: str
    exit_status: int | None = None
    combined_log: str = ""
    artifact_path: str | None = None
    error_message: str | None = None

    @property
    def artifact_filename(self) -> str | None:
        if self.artifact_path is None:
            return None
        return self.artifact_path.replace("\\", "/").rsplit("/", 1)[-1]


class ContainerSpec(BaseModel):
    name: str
    image: str
    command: list[str]
    workspace_dir: str
    mount_path: str
    working_dir: str
