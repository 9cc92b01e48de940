from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from render_server.core.config import get_settings

logger = logging.getLogger(__name__)

_configure_lock = Lock()
_is_configured = False


def _tracer_options(settings: Any) -> dict[str, Any]:
    # Spans export synchronously only in development.
    return {
        "project_name": settings.phoenix_project_name,
        "endpoint": settings.phoenix_collector_endpoint,
        "batch": settings.environment != "development",
        "auto_instrument": True,
    }


def configure_agent_observability() -> bool:
    """Register Phoenix tracing for model, graph and tool spans.

    Returns whether tracing is active. Setup problems never block startup.
    """
    global _is_configured
    if _is_configured:
        return True

    settings = get_settings()
    if not settings.phoenix_enabled:
        logger.debug("Phoenix tracing disabled.")
        return False

    with _configure_lock:
        if _is_configured:
            return True
        options = _tracer_options(settings)
        try:
            from phoenix.otel import register

            register(**options)
        except Exception:
            logger.warning(
                "Phoenix observability setup failed; rendering continues without traces.",
                exc_info=True,
            )
            return False
        _is_configured = True
        logger.info(
            "Phoenix tracing enabled for project %s (%s).",
            options["project_name"],
            options["endpoint"],
        )
        return True
