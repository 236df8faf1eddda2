"""
app/api/routers package marker.
"""

from app.api.routers.cleanup_router import router as cleanup_router
from app.api.routers.kpi_router import router as kpi_router
from app.api.routers.local_data_router import router as local_data_router
from app.api.routers.sync_router import router as sync_router
from app.api.routers.upload_router import router as upload_router

__all__ = [
    "cleanup_router",
    "kpi_router",
    "local_data_router",
    "sync_router",
    "upload_router",
]
