from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from langchain_openai import ChatOpenAI

from render_server.core.config import Settings, get_settings


@dataclass(frozen=True)
class ModelSpec:
    name: str
    build_model: Callable[[], Any]


def openailike_model_spec(settings: Settings | None = None) -> ModelSpec:
    resolved = settings or get_settings()

    def _build_model() -> ChatOpenAI:
        model_kwargs: dict[str, Any] = {
            "model": resolved.openailike_model,
            "streaming": True,
            "use_responses_api": resolved.openailike_use_responses_api,
            "reasoning": {"effort": resolved.openailike_reasoning_effort},
        }
        if resolved.openailike_api_key:
            model_kwargs["api_key"] = resolved.openailike_api_key
        if resolved.openailike_base_url:
            # OpenAI-compatible providers often need a custom base URL.
            model_kwargs["base_url"] = resolved.openailike_base_url

        return ChatOpenAI(**model_kwargs)

    return ModelSpec(name=resolved.openailike_model, build_model=_build_model)
