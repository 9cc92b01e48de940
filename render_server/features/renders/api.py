from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from .errors import ArtifactForbiddenError, ArtifactNotFoundError, ArtifactRequestError
from .service import locate_artifact

router = APIRouter(prefix="/api/videos", tags=["renders"])

_VIDEO_CACHE_CONTROL = "public, max-age=31536000, immutable"


def _raise_http_error(exc: Exception) -> None:
    if isinstance(exc, ArtifactRequestError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, ArtifactNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if isinstance(exc, ArtifactForbiddenError):
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    raise exc


@router.get("/{execution_id}/{filename}")
async def get_rendered_video(execution_id: str, filename: str) -> FileResponse:
    try:
        path = locate_artifact(execution_id, filename)
    except Exception as exc:
        _raise_http_error(exc)
    return FileResponse(
        path,
        media_type="video/mp4",
        headers={"Cache-Control": _VIDEO_CACHE_CONTROL},
    )
