"""
API routers package.
"""

from api.routers.command import router as command_router
from api.routers.system import router as system_router

__all__ = ["command_router", "system_router"]
