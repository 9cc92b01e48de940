from __future__ import annotations

import logging
import operator
from typing import Annotated, Any, Iterable, Literal, TypedDict

from langchain_core.messages import AIMessage, BaseMessage, SystemMessage, ToolMessage
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

logger = logging.getLogger(__name__)

GENERATE_NODE = "generate"
DISPATCH_NODE = "dispatch"


class RenderAgentState(TypedDict):
    messages: Annotated[list[BaseMessage], operator.add]


def route_after_generate(state: RenderAgentState) -> Literal["dispatch", "__end__"]:
    messages = state.get("messages") or []
    if not messages:
        return END
    last_message = messages[-1]
    if isinstance(last_message, AIMessage) and last_message.tool_calls:
        return DISPATCH_NODE
    return END


def build_agent_runtime(model: Any, *, system_prompt: str, tools: Iterable[Any]):
    """Compile the generate/dispatch loop.

    ``generate`` calls the tool-bound model with the whole conversation;
    ``dispatch`` runs every tool call of the latest assistant message and feeds
    the results back to ``generate``. The loop ends on a message without tool
    calls.
    """
    tools_by_name = {item.name: item for item in tools}
    bound_model = model.bind_tools(list(tools_by_name.values())) if hasattr(model, "bind_tools") else model

    async def _generate(state: RenderAgentState, config: RunnableConfig) -> dict[str, Any]:
        response = await bound_model.ainvoke(
            [SystemMessage(content=system_prompt), *state["messages"]],
            config,
        )
        return {"messages": [response]}

    async def _dispatch(state: RenderAgentState, config: RunnableConfig) -> dict[str, Any]:
        last_message = state["messages"][-1]
        results: list[BaseMessage] = []
        for call in getattr(last_message, "tool_calls", None) or []:
            selected = tools_by_name.get(call["name"])
            if selected is None:
                logger.warning("Model requested unknown tool %r.", call["name"])
                results.append(
                    ToolMessage(
                        content=f"Error: tool '{call['name']}' is not available.",
                        tool_call_id=call["id"],
                        name=call["name"],
                        status="error",
                    )
                )
                continue
            try:
                results.append(await selected.ainvoke({**call, "type": "tool_call"}, config))
            except Exception as exc:
                # Invalid arguments go back to the model instead of ending the run.
                logger.warning("Tool %r failed for call %s.", call["name"], call["id"], exc_info=True)
                results.append(
                    ToolMessage(
                        content=f"Error: {exc!r}\n Please fix your mistakes.",
                        tool_call_id=call["id"],
                        name=call["name"],
                        status="error",
                    )
                )
        return {"messages": results}

    graph = StateGraph(RenderAgentState)
    graph.add_node(GENERATE_NODE, _generate)
    graph.add_node(DISPATCH_NODE, _dispatch)
    graph.add_edge(START, GENERATE_NODE)
    graph.add_conditional_edges(GENERATE_NODE, route_after_generate, [DISPATCH_NODE, END])
    graph.add_edge(DISPATCH_NODE, GENERATE_NODE)
    return graph.compile()


def split_ai_content(message: AIMessage) -> list[str]:
    text: list[str] = []
    content = message.content
    if isinstance(content, list):
        # Responses API output arrives as typed content blocks.
        for block in content:
            if isinstance(block, str):
                text.append(block)
                continue
            if not isinstance(block, dict):
                continue
            if block.get("type") in {"text", "output_text"}:
                value = block.get("text") or block.get("output_text")
                if value:
                    text.append(str(value))
    elif isinstance(content, str) and content:
        text.append(content)
    return text
