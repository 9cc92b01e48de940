from __future__ import annotations

import re

DEFAULT_SCENE_CLASS = "Scene"

_CLASS_DECLARATION_RE = re.compile(r"class\s+(\w+)\s*\(")


def detect_scene_class(source_text: str) -> str:
    """Return the first class declared in ``source_text``.

    This is a textual scan, not a parse: commented-out or string-embedded
    declarations also match. Falls back to ``Scene`` when nothing is declared.
    """
    match = _CLASS_DECLARATION_RE.search(source_text)
    if match is None:
        return DEFAULT_SCENE_CLASS
    return match.group(1)
