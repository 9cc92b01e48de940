from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    frontend_origins: str = Field(
        default="http://localhost:3000",
        validation_alias="FRONTEND_ORIGINS",
    )

    openailike_model: str = Field(default="gpt-5.2", validation_alias="OPENAILIKE_MODEL")
    openailike_api_key: str = Field(default="", validation_alias="OPENAILIKE_API_KEY")
    openailike_base_url: str = Field(default="", validation_alias="OPENAILIKE_BASE_URL")
    openailike_reasoning_effort: str = Field(
        default="medium",
        validation_alias="OPENAILIKE_REASONING_EFFORT",
    )
    openailike_use_responses_api: bool = Field(
        default=True,
        validation_alias="OPENAILIKE_USE_RESPONSES_API",
    )
    agent_extra_instructions: str = Field(default="", validation_alias="AGENT_EXTRA_INSTRUCTIONS")
    agent_recursion_limit: int = Field(default=25, validation_alias="AGENT_RECURSION_LIMIT")

    render_docker_bin: str = Field(default="docker", validation_alias="RENDER_DOCKER_BIN")
    render_docker_image: str = Field(
        default="manimcommunity/manim:v0.19.0",
        validation_alias="RENDER_DOCKER_IMAGE",
    )
    render_quality: str = Field(default="l", validation_alias="RENDER_QUALITY")
    render_workspace_root: str = Field(
        default="tmp/render-executions",
        validation_alias="RENDER_WORKSPACE_ROOT",
    )
    render_log_tail_chars: int = Field(default=8_000, validation_alias="RENDER_LOG_TAIL_CHARS")
    render_workspace_ttl_seconds: int = Field(
        default=0,
        validation_alias="RENDER_WORKSPACE_TTL_SECONDS",
    )
    render_workspace_sweep_interval_seconds: int = Field(
        default=600,
        validation_alias="RENDER_WORKSPACE_SWEEP_INTERVAL_SECONDS",
    )
    public_base_url: str = Field(default="", validation_alias="PUBLIC_BASE_URL")

    phoenix_enabled: bool = Field(default=False, validation_alias="PHOENIX_ENABLED")
    phoenix_project_name: str = Field(default="render-agent", validation_alias="PHOENIX_PROJECT_NAME")
    phoenix_collector_endpoint: str = Field(
        default="http://localhost:6006/v1/traces",
        validation_alias="PHOENIX_COLLECTOR_ENDPOINT",
    )

    @computed_field
    @property
    def frontend_origin_list(self) -> list[str]:
        return [item.strip() for item in self.frontend_origins.split(",") if item.strip()]

    @property
    def render_workspace_path(self) -> Path:
        root = Path(self.render_workspace_root)
        if not root.is_absolute():
            root = Path.cwd() / root
        return root


@lru_cache
def get_settings() -> Settings:
    return Settings()
