from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[3]
SERVER = ROOT / "render_server"


def _iter_python_files(base: Path) -> list[Path]:
    return sorted(
        file
        for file in base.rglob("*.py")
        if "__pycache__" not in file.parts and ".venv" not in file.parts
    )


def _imports_for(file_path: Path) -> list[tuple[str, int]]:
    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    imports: list[tuple[str, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append((alias.name, node.lineno))
        elif isinstance(node, ast.ImportFrom):
            module = node.module or ""
            if node.level > 0:
                module = f"{'.' * node.level}{module}"
            imports.append((module, node.lineno))
    return imports


def test_feature_services_do_not_import_api_modules() -> None:
    violations: list[str] = []
    for file_path in _iter_python_files(SERVER / "features"):
        if file_path.name != "service.py":
            continue
        for module, lineno in _imports_for(file_path):
            if module.startswith("render_server.") and "api" in module.split("render_server.", 1)[1].split("."):
                violations.append(f"{file_path}:{lineno} imports '{module}'")
            if module.startswith(".api"):
                violations.append(f"{file_path}:{lineno} imports '{module}'")
    assert not violations, "Service modules cannot import API modules:\n" + "\n".join(violations)


def test_renders_and_shared_features_do_not_import_agent_runtime() -> None:
    violations: list[str] = []
    for feature_name in ("renders", "shared"):
        for file_path in _iter_python_files(SERVER / "features" / feature_name):
            for module, lineno in _imports_for(file_path):
                if module.startswith("render_server.features.agent"):
                    violations.append(f"{file_path}:{lineno} imports '{module}'")
                if module.startswith("langchain") or module.startswith("langgraph"):
                    violations.append(f"{file_path}:{lineno} imports '{module}'")
    assert not violations, "Renders/shared modules cannot import agent runtime modules:\n" + "\n".join(violations)


def test_sandbox_does_not_import_http_layer() -> None:
    violations: list[str] = []
    for file_path in _iter_python_files(SERVER / "features" / "agent" / "sandbox"):
        for module, lineno in _imports_for(file_path):
            if module.startswith("fastapi") or module.startswith("render_server.features.agent.api"):
                violations.append(f"{file_path}:{lineno} imports '{module}'")
    assert not violations, "Sandbox modules cannot import the HTTP layer:\n" + "\n".join(violations)
