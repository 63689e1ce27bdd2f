from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from chara_profile.api.deps import GeneratorDep, get_app_settings
from chara_profile.config import Settings
from chara_profile.main import create_app
from chara_profile.services.llm import LLMService
from chara_profile.services.profile_generator import ProfileGenerationService
from tests.fakes import FakeLLM


@pytest.mark.asyncio
async def test_llm_client_is_shared_across_requests(test_settings: Settings):
    app = create_app()

    async def override_get_settings() -> Settings:
        return test_settings

    app.dependency_overrides[get_app_settings] = override_get_settings
    seen: list = []

    @app.get("/_current_llm")
    async def current_llm(generator: ProfileGenerationService = GeneratorDep):
        seen.append(generator.llm)
        return {}

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.get("/_current_llm")
        await client.get("/_current_llm")

    assert len(seen) == 2
    assert seen[0] is seen[1]
    assert isinstance(seen[0], LLMService)
    assert app.state.llm is seen[0]


@pytest.mark.asyncio
async def test_lifespan_closes_llm_client():
    app = create_app()
    llm = FakeLLM()
    app.state.llm = llm

    async with app.router.lifespan_context(app):
        assert not llm.closed

    assert llm.closed
    assert app.state.llm is None


@pytest.mark.asyncio
async def test_lifespan_without_llm_client():
    app = create_app()
    async with app.router.lifespan_context(app):
        pass
    assert getattr(app.state, "llm", None) is None
