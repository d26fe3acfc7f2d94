from fastapi import APIRouter
from endpoints.notify import router as notify_router
from endpoints.realtime_ws import router as realtime_ws_router

api_router = APIRouter()
api_router.include_router(notify_router, tags=["notifications"])
api_router.include_router(realtime_ws_router, tags=["realtime"])
