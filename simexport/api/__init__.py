"""
api/ - HTTP surface
"""

from .endpoints import (
    router,
    create_app,
    get_orchestrator,
    ExportOneRequest,
    ExportManyRequest,
)

__all__ = [
    "router",
    "create_app",
    "get_orchestrator",
    "ExportOneRequest",
    "ExportManyRequest",
]
