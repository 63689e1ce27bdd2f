"""角色档案生成服务

名字 -> 固定系统提示词 + 输出 Schema -> 生成服务 -> 本地再校验 -> CharacterProfile。
单次、无状态；不重试、不修补字段，失败时不会返回部分结果。
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from chara_profile.config import Settings
from chara_profile.exceptions import (
    GenerationFailedError,
    InvalidInputError,
    NonConformingOutputError,
    ProviderUnavailableError,
)
from chara_profile.prompts.character_profile import build_system_prompt
from chara_profile.schemas.character import CharacterProfile, NameRequest
from chara_profile.schemas.validation import (
    NameRequestError,
    ProfileValidationError,
    validate_name_request,
    validate_profile,
)
from chara_profile.services.llm import StructuredLLM

logger = logging.getLogger(__name__)

SCHEMA_NAME = "character_profile"


class ProfileGenerationService:
    def __init__(self, llm: StructuredLLM, settings: Settings):
        self.llm = llm
        self.settings = settings

    def validate(self, raw: Any) -> NameRequest:
        try:
            return validate_name_request(raw)
        except NameRequestError as exc:
            raise InvalidInputError(exc.details) from exc

    async def generate(self, name: str) -> CharacterProfile:
        name = name.strip()
        started = time.perf_counter()
        logger.info(f"Generating character profile for {name!r}")

        try:
            raw = await asyncio.wait_for(
                self.llm.generate_structured(
                    system=build_system_prompt(),
                    prompt=name,
                    schema=CharacterProfile.output_schema(),
                    schema_name=SCHEMA_NAME,
                ),
                timeout=self.settings.request_timeout_s,
            )
        except asyncio.TimeoutError as exc:
            logger.error(f"Profile generation timed out after {self.settings.request_timeout_s}s")
            raise ProviderUnavailableError(
                "Generation timed out",
                details={"timeout_s": self.settings.request_timeout_s},
            ) from exc
        except Exception as exc:
            if self.llm.is_retryable_error(exc):
                logger.error(f"Generation provider unavailable: {exc}")
                raise ProviderUnavailableError("Generation provider unavailable") from exc
            logger.error(f"Profile generation failed: {exc}", exc_info=True)
            raise GenerationFailedError(details={"reason": type(exc).__name__}) from exc

        try:
            profile = validate_profile(raw)
        except ProfileValidationError as exc:
            logger.warning(f"Generated profile violates schema: {exc.paths}")
            raise NonConformingOutputError(
                "Generated profile does not match the schema",
                details={
                    "violations": [
                        {"path": v.path, "reason": v.reason, "message": v.message} for v in exc.violations
                    ]
                },
            ) from exc

        logger.info(f"Generated profile for {name!r} in {time.perf_counter() - started:.2f}s")
        return profile

    async def generate_from_payload(self, raw: Any) -> CharacterProfile:
        request = self.validate(raw)
        return await self.generate(request.name)
