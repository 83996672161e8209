"""API routers."""

from doc_registry.routers.doc_manager import router as doc_manager_router
from doc_registry.routers.documents import ids_router
from doc_registry.routers.documents import router as documents_router
from doc_registry.routers.health import router as health_router

__all__ = [
    "health_router",
    "documents_router",
    "ids_router",
    "doc_manager_router",
]
