import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import api_router
from .core.config import get_settings
from .features.agent.observability import configure_agent_observability
from .features.shared.render_workspace import cleanup_stale_workspaces

logger = logging.getLogger(__name__)

settings = get_settings()


async def _workspace_sweeper_loop() -> None:
    while True:
        try:
            await asyncio.to_thread(cleanup_stale_workspaces)
        except Exception:
            logger.warning("Render workspace sweep failed.", exc_info=True)
        interval = max(1, settings.render_workspace_sweep_interval_seconds)
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_agent_observability()
    sweeper_task: asyncio.Task[None] | None = None
    if settings.render_workspace_ttl_seconds > 0:
        logger.info(
            "Sweeping render workspaces older than %ss under %s.",
            settings.render_workspace_ttl_seconds,
            settings.render_workspace_path,
        )
        sweeper_task = asyncio.create_task(_workspace_sweeper_loop())
    try:
        yield
    finally:
        if sweeper_task is not None:
            sweeper_task.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper_task


app = FastAPI(title="Render Agent API", docs_url="/api/docs", lifespan=lifespan)
app.include_router(api_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def read_root() -> dict:
    return {"status": "ok", "service": "render-agent"}


@app.get("/health")
async def health_check() -> dict:
    return {"healthy": True}
