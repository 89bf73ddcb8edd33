from fastapi import APIRouter

from linkpreview.api.v1 import preview

api_router = APIRouter(prefix="/v1")

api_router.include_router(preview.router, prefix="/preview", tags=["Preview"])
