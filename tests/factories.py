from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

_PROFILE: dict[str, Any] = {
    "meta": {
        "id": "luffy-0001",
        "version": "1.0",
        "language": "ja",
        "tags": ["海賊", "少年漫画", "冒険"],
        "created_by": "chara-profile",
        "updated_at": "2025-01-01T12:00:00+09:00",
        "license": "CC-BY-4.0",
    },
    "identity": {
        "name": "モンキー・D・ルフィ",
        "aliases": ["麦わらのルフィ"],
        "pronouns": "俺",
        "age": "19歳",
        "species_or_race": "人間",
        "role_or_occupation": "麦わらの一味船長",
        "archetype": "熱血主人公",
    },
    "description": "海賊王を目指すゴム人間の少年。",
    "appearance": {
        "height": "174cm",
        "build": "細身で筋肉質",
        "distinct_features": ["麦わら帽子", "左目の下の傷"],
        "clothing_style": "赤いベストと短パン、サンダル",
        "color_palette": ["赤", "青", "黄"],
    },
    "personality": {
        "summary": "自由奔放で仲間思い。",
        "traits_positive": ["楽天的", "勇敢"],
        "traits_negative": ["無鉄砲"],
        "values": ["仲間", "自由"],
        "quirks": ["肉が大好物"],
        "motivations": ["海賊王になる"],
        "fears": ["仲間を失うこと"],
        "temperament": "多血質",
    },
    "background": {
        "birthplace": "フーシャ村",
        "family": ["モンキー・D・ガープ（祖父）"],
        "education": "祖父による鍛錬",
        "culture": "東の海",
        "formative_events": ["シャンクスとの出会い"],
    },
    "capabilities": {
        "skills": ["格闘"],
        "powers_or_magic": ["ゴムゴムの実"],
        "equipment": ["麦わら帽子"],
        "weaknesses": ["海水"],
        "constraints_or_costs": ["泳げない"],
    },
    "relationships": [
        {
            "name_or_id": "ロロノア・ゾロ",
            "type": "仲間",
            "status": "良好",
            "history": "最初の仲間として加入した。",
            "metrics": {"trust": 0.95, "affection": 0.8, "tension": 0.1},
        },
        {
            "name_or_id": "シャンクス",
            "type": "恩人",
            "status": "再会を約束",
            "history": "麦わら帽子を託された。",
            "metrics": {"trust": 0.9, "affection": 0.75, "tension": 0.0},
        },
    ],
    "story": {
        "goals": {"short_term": ["次の島へ向かう"], "long_term": ["ひとつなぎの大秘宝を見つける"]},
        "stakes": "仲間の夢と命",
        "obstacles": ["海軍", "四皇"],
        "arc": {
            "setup": "フーシャ村から出航する。",
            "flaws_exposed": "無謀さが仲間を危険にさらす。",
            "turning_points": ["頂上戦争"],
            "growth": "仲間を頼ることを学ぶ。",
            "resolution": "未完",
        },
        "timeline": [
            {
                "date": "1515-05-05",
                "age": "7歳",
                "title": "シャンクスとの別れ",
                "summary": "麦わら帽子を預かる。",
                "impact": "海賊を志す決意を固める。",
            }
        ],
    },
    "voice": {
        "diction": "砕けた口語",
        "tone": "明るく力強い",
        "catchphrases": ["海賊王に、おれはなる！"],
        "dialogue_examples": ["肉ーーー！"],
    },
    "setting": {
        "world": "ONE PIECE の世界",
        "era": "大海賊時代",
        "locations": ["東の海", "偉大なる航路"],
        "tech_level_or_magic_rules": "悪魔の実の能力が存在する",
    },
}

TOP_LEVEL_SECTIONS = [
    "meta",
    "identity",
    "description",
    "appearance",
    "personality",
    "background",
    "capabilities",
    "relationships",
    "story",
    "voice",
    "setting",
]


def make_profile_data(**overrides: Any) -> dict[str, Any]:
    """返回一份完整且合法的档案数据；overrides 以点分路径覆盖字段。"""
    data = copy.deepcopy(_PROFILE)
    for path, value in overrides.items():
        set_path(data, path.replace("__", "."), value)
    return data


def _parent(data: Any, path: str) -> tuple[Any, str | int]:
    parts = path.split(".")
    node = data
    for part in parts[:-1]:
        node = node[int(part)] if isinstance(node, list) else node[part]
    last = parts[-1]
    return node, int(last) if isinstance(node, list) else last


def set_path(data: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    node, key = _parent(data, path)
    node[key] = value
    return data


def delete_path(data: dict[str, Any], path: str) -> dict[str, Any]:
    node, key = _parent(data, path)
    del node[key]
    return data


def all_field_paths(node: Any = None, prefix: str = "") -> list[str]:
    """列出档案中所有字段（含嵌套对象、列表第一个元素中的字段）的点分路径。"""
    if node is None:
        node = _PROFILE
    paths: list[str] = []
    if isinstance(node, dict):
        for key, value in node.items():
            path = f"{prefix}.{key}" if prefix else key
            paths.append(path)
            paths.extend(all_field_paths(value, path))
    elif isinstance(node, list) and node and isinstance(node[0], dict):
        paths.extend(all_field_paths(node[0], f"{prefix}.0"))
    return paths


def write_profile(directory: Path, filename: str, data: Any | None = None) -> Path:
    path = directory / filename
    payload = make_profile_data() if data is None else data
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path
