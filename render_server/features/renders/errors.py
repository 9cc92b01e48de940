from __future__ import annotations


class RenderArtifactError(Exception):
    """Base exception for rendered artifact lookups."""


class ArtifactRequestError(RenderArtifactError):
    pass


class ArtifactNotFoundError(RenderArtifactError):
    pass


class ArtifactForbiddenError(RenderArtifactError):
    pass
