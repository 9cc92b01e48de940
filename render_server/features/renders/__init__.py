from .errors import (
    ArtifactForbiddenError,
    ArtifactNotFoundError,
    ArtifactRequestError,
    RenderArtifactError,
)
from .service import locate_artifact, validate_artifact_lookup

__all__ = [
    "ArtifactForbiddenError",
    "ArtifactNotFoundError",
    "ArtifactRequestError",
    "RenderArtifactError",
    "locate_artifact",
    "validate_artifact_lookup",
]
