from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from chara_profile.api.deps import ProfileStoreDep
from chara_profile.schemas.character import CharacterProfile
from chara_profile.services.profile_store import ProfileStore

router = APIRouter()


@router.get("")
async def list_profiles(store: ProfileStore = ProfileStoreDep) -> dict[str, Any]:
    return {"ok": True, "items": store.list()}


@router.get("/{filename}", response_model=CharacterProfile)
async def get_profile(filename: str, store: ProfileStore = ProfileStoreDep):
    return store.read(filename)
