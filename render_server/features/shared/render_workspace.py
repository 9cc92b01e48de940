from __future__ import annotations

import logging
import os
import shutil
import time
from pathlib import Path
from typing import Callable

from render_server.core.config import get_settings

logger = logging.getLogger(__name__)

SOURCE_FILENAME = "scene.py"
ARTIFACT_EXTENSION = ".mp4"
OUTPUT_SUBTREE = ("media", "videos")


def render_workspace_root() -> Path:
    root = get_settings().render_workspace_path
    root.mkdir(parents=True, exist_ok=True)
    return root


def workspace_dir_for(request_id: str) -> Path:
    return render_workspace_root() / request_id


def output_dir_for(workspace_dir: Path) -> Path:
    return workspace_dir.joinpath(*OUTPUT_SUBTREE)


def prepare_workspace(request_id: str, source_text: str) -> Path:
    workspace_dir = workspace_dir_for(request_id)
    workspace_dir.mkdir(parents=True, exist_ok=False)
    # The render image runs as a non-root user that does not own the host directory.
    workspace_dir.chmod(0o777)
    source_path = workspace_dir / SOURCE_FILENAME
    source_path.write_text(source_text, encoding="utf-8")
    return workspace_dir


def find_first_file(base: Path, predicate: Callable[[str], bool]) -> Path | None:
    """Depth-first search in directory enumeration order."""
    try:
        entries = list(os.scandir(base))
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return None

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            found = find_first_file(Path(entry.path), predicate)
            if found is not None:
                return found
        elif entry.is_file() and predicate(entry.name):
            return Path(entry.path)
    return None


def find_rendered_video(workspace_dir: Path) -> Path | None:
    return find_first_file(
        output_dir_for(workspace_dir),
        lambda name: name.endswith(ARTIFACT_EXTENSION),
    )


def cleanup_stale_workspaces(*, now: float | None = None) -> list[str]:
    settings = get_settings()
    ttl = settings.render_workspace_ttl_seconds
    if ttl <= 0:
        return []

    root = settings.render_workspace_path
    if not root.exists():
        return []

    cutoff = (now if now is not None else time.time()) - ttl
    removed: list[str] = []
    for entry in root.iterdir():
        if not entry.is_dir():
            continue
        try:
            modified = entry.stat().st_mtime
        except FileNotFoundError:
            continue
        if modified >= cutoff:
            continue
        shutil.rmtree(entry, ignore_errors=True)
        removed.append(entry.name)

    if removed:
        logger.info("Removed %d stale render workspaces.", len(removed))
    return removed
