from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request

from chara_profile.api.deps import GeneratorDep
from chara_profile.exceptions import BadRequestError
from chara_profile.schemas.character import CharacterProfile
from chara_profile.services.profile_generator import ProfileGenerationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/character", response_model=CharacterProfile)
async def create_character_profile(
    request: Request,
    generator: ProfileGenerationService = GeneratorDep,
):
    """根据角色名生成角色档案。

    请求体手动解析：非法 JSON 返回 400 `Invalid JSON body`，
    而不是 FastAPI 默认的 422。
    """
    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise BadRequestError() from exc

    name_request = generator.validate(body)
    logger.info(f"[character API] received name: {name_request.name}")
    return await generator.generate(name_request.name)
