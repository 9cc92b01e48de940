from __future__ import annotations

from typing import Any

from render_server.core.config import Settings, get_settings
from render_server.features.agent.models import openailike_model_spec
from render_server.features.agent.prompts import build_agent_system_prompt
from render_server.features.agent.runtime import build_agent_runtime
from render_server.features.agent.sandbox import RENDER_TOOLS


def build_agent(settings: Settings | None = None) -> Any:
    resolved = settings or get_settings()
    model_spec = openailike_model_spec(resolved)
    return build_agent_runtime(
        model_spec.build_model(),
        system_prompt=build_agent_system_prompt(extra_instructions=resolved.agent_extra_instructions),
        tools=RENDER_TOOLS,
    )
