from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from chara_profile.api.deps import get_app_settings, get_llm, get_profile_store
from chara_profile.config import Settings
from chara_profile.main import create_app
from chara_profile.services.profile_generator import ProfileGenerationService
from chara_profile.services.profile_store import DirectoryProfileStore
from tests.fakes import FakeLLM


@pytest.fixture()
def profiles_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "profiles"
    directory.mkdir()
    return directory


@pytest.fixture()
def test_settings(profiles_dir: Path) -> Settings:
    return Settings(
        anthropic_api_key="test-key",
        openai_api_key="test-key",
        request_timeout_s=5.0,
        profiles_dir=profiles_dir,
    )


@pytest.fixture()
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture()
def generator(fake_llm: FakeLLM, test_settings: Settings) -> ProfileGenerationService:
    return ProfileGenerationService(fake_llm, test_settings)


@pytest.fixture()
def app(test_settings: Settings, fake_llm: FakeLLM, profiles_dir: Path):
    app = create_app()

    async def override_get_settings() -> Settings:
        return test_settings

    async def override_get_llm() -> FakeLLM:
        return fake_llm

    async def override_get_profile_store() -> DirectoryProfileStore:
        return DirectoryProfileStore(profiles_dir)

    app.dependency_overrides[get_app_settings] = override_get_settings
    app.dependency_overrides[get_llm] = override_get_llm
    app.dependency_overrides[get_profile_store] = override_get_profile_store
    return app


@pytest_asyncio.fixture()
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
