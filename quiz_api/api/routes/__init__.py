from __future__ import annotations

from quiz_api.api.routes.operations import create_operations_router
from quiz_api.api.routes.render import RenderRouter, create_render_router

__all__ = ["RenderRouter", "create_operations_router", "create_render_router"]
