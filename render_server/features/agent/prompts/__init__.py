from render_server.features.agent.prompts.render_tools import EXECUTE_CODE_TOOL_DESCRIPTION
from render_server.features.agent.prompts.system_prompt import (
    BASE_AGENT_SYSTEM_PROMPT,
    build_agent_system_prompt,
)

__all__ = [
    "BASE_AGENT_SYSTEM_PROMPT",
    "EXECUTE_CODE_TOOL_DESCRIPTION",
    "build_agent_system_prompt",
]
