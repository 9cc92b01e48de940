from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from render_server.core.config import get_settings
from render_server.features.shared.render_workspace import ARTIFACT_EXTENSION, find_first_file

from .errors import ArtifactForbiddenError, ArtifactNotFoundError, ArtifactRequestError

logger = logging.getLogger(__name__)


class ArtifactLookup(BaseModel):
    execution_id: str = Field(min_length=1, pattern=r"^[a-zA-Z0-9_-]+$")
    filename: str = Field(min_length=1, pattern=r"^[a-zA-Z0-9_.-]+$")


def validate_artifact_lookup(execution_id: str, filename: str) -> ArtifactLookup:
    try:
        lookup = ArtifactLookup(execution_id=execution_id, filename=filename)
    except ValidationError as exc:
        raise ArtifactRequestError("Invalid request parameters.") from exc
    if not lookup.filename.endswith(ARTIFACT_EXTENSION):
        raise ArtifactRequestError(f"Filename must end with {ARTIFACT_EXTENSION}.")
    return lookup


def locate_artifact(execution_id: str, filename: str) -> Path:
    """Find ``filename`` anywhere under one execution's working area."""
    lookup = validate_artifact_lookup(execution_id, filename)

    execution_dir = get_settings().render_workspace_path / lookup.execution_id
    if not execution_dir.is_dir():
        raise ArtifactNotFoundError("Execution not found.")

    found = find_first_file(execution_dir, lambda name: name == lookup.filename)
    if found is None:
        raise ArtifactNotFoundError("Video file not found.")

    resolved = found.resolve()
    if not resolved.is_relative_to(execution_dir.resolve()):
        logger.warning(
            "Artifact path %s resolves outside execution directory %s.",
            resolved,
            execution_dir,
        )
        raise ArtifactForbiddenError("Invalid file path.")
    return resolved
