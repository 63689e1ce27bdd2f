from fastapi import APIRouter

from chara_profile.api.routes.character import router as character_router
from chara_profile.api.routes.profiles import router as profiles_router

api_router = APIRouter()
api_router.include_router(character_router, tags=["character"])
api_router.include_router(profiles_router, prefix="/profiles", tags=["profiles"])
