from fastapi import APIRouter

from . import scan

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(scan.router)
