from fastapi import APIRouter
from shiptrack.api.routers import shipments, imports, dashboard

api_router = APIRouter()
api_router.include_router(shipments.router, prefix="/shipments", tags=["shipments"])
api_router.include_router(imports.router, prefix="/bulk-imports", tags=["bulk-imports"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
