from fastapi import APIRouter
from streetsafety.api.routes import health, auth, crimes, realtime

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(crimes.router)
api_router.include_router(realtime.router)
