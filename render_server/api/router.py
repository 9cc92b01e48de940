from fastapi import APIRouter

from render_server.features.agent.api.router import router as agent_router
from render_server.features.renders.api import router as renders_router

api_router = APIRouter()
api_router.include_router(agent_router)
api_router.include_router(renders_router)
