from __future__ import annotations

from fastapi import Depends, Request

from chara_profile.config import Settings, get_settings
from chara_profile.services.llm import StructuredLLM, create_llm_service
from chara_profile.services.profile_generator import ProfileGenerationService
from chara_profile.services.profile_store import DirectoryProfileStore, ProfileStore


async def get_app_settings() -> Settings:
    return get_settings()


async def get_llm(request: Request, settings: Settings = Depends(get_app_settings)) -> StructuredLLM:
    """每个应用只创建一个 LLM 客户端，关闭由 lifespan 负责。"""
    llm = getattr(request.app.state, "llm", None)
    if llm is None:
        llm = create_llm_service(settings)
        request.app.state.llm = llm
    return llm


async def get_generator(
    settings: Settings = Depends(get_app_settings),
    llm: StructuredLLM = Depends(get_llm),
) -> ProfileGenerationService:
    return ProfileGenerationService(llm, settings)


async def get_profile_store(settings: Settings = Depends(get_app_settings)) -> ProfileStore:
    return DirectoryProfileStore(settings.profiles_dir)


SettingsDep = Depends(get_app_settings)
GeneratorDep = Depends(get_generator)
ProfileStoreDep = Depends(get_profile_store)
