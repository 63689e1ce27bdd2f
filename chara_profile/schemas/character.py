"""角色档案（CharacterProfile）与输入（NameRequest）的数据契约。

这里的模型是唯一的结构定义：校验器、发给生成服务的 JSON Schema、
系统提示词中嵌入的 Schema 都由它派生。
"""
from __future__ import annotations

import copy
from functools import lru_cache
from typing import Annotated, Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictStr, StringConstraints, field_validator
from pydantic_core import PydanticCustomError

NAME_MAX_LENGTH = 100

# 仅允许 ASCII 数字，时区偏移必须显式给出
TIMESTAMP_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(?:\.[0-9]{1,3})?[+-][0-9]{2}:[0-9]{2}$"
DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"

Text = StrictStr
TextList = list[StrictStr]
Language = Literal["ja", "en", "zh", "ko", "fr", "de", "es", "it", "pt", "ru"]
LANGUAGES: tuple[str, ...] = get_args(Language)
Timestamp = Annotated[str, StringConstraints(strict=True, pattern=TIMESTAMP_PATTERN)]
Date = Annotated[str, StringConstraints(strict=True, pattern=DATE_PATTERN)]
Metric = Annotated[StrictFloat, Field(ge=0, le=1)]


class NameRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: StrictStr

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise PydanticCustomError("required", "name is required")
        if len(v) > NAME_MAX_LENGTH:
            raise PydanticCustomError("too_long", "name is too long")
        return v


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class Meta(_Section):
    id: Text
    version: Text
    language: Language
    tags: TextList
    created_by: Text
    updated_at: Timestamp
    license: Text


class Identity(_Section):
    name: Text
    aliases: TextList
    pronouns: Text
    age: Text
    species_or_race: Text
    role_or_occupation: Text
    archetype: Text


class Appearance(_Section):
    height: Text
    build: Text
    distinct_features: TextList
    clothing_style: Text
    color_palette: TextList


class Personality(_Section):
    summary: Text
    traits_positive: TextList
    traits_negative: TextList
    values: TextList
    quirks: TextList
    motivations: TextList
    fears: TextList
    temperament: Text


class Background(_Section):
    birthplace: Text
    family: TextList
    education: Text
    culture: Text
    formative_events: TextList


class Capabilities(_Section):
    skills: TextList
    powers_or_magic: TextList
    equipment: TextList
    weaknesses: TextList
    constraints_or_costs: TextList


class RelationshipMetrics(_Section):
    trust: Metric
    affection: Metric
    tension: Metric


class Relationship(_Section):
    name_or_id: Text
    type: Text
    status: Text
    history: Text
    metrics: RelationshipMetrics


class Goals(_Section):
    short_term: TextList
    long_term: TextList


class Arc(_Section):
    setup: Text
    flaws_exposed: Text
    turning_points: TextList
    growth: Text
    resolution: Text


class TimelineEvent(_Section):
    date: Date
    age: Text
    title: Text
    summary: Text
    impact: Text


class Story(_Section):
    goals: Goals
    stakes: Text
    obstacles: TextList
    arc: Arc
    timeline: list[TimelineEvent]


class Voice(_Section):
    diction: Text
    tone: Text
    catchphrases: TextList
    dialogue_examples: TextList


class Setting(_Section):
    world: Text
    era: Text
    locations: TextList
    tech_level_or_magic_rules: Text


class CharacterProfile(_Section):
    meta: Meta
    identity: Identity
    description: Text
    appearance: Appearance
    personality: Personality
    background: Background
    capabilities: Capabilities
    relationships: list[Relationship]
    story: Story
    voice: Voice
    setting: Setting

    @classmethod
    def output_schema(cls) -> dict[str, Any]:
        """返回给生成服务使用的 JSON Schema（引用已内联，属性顺序与声明一致）。"""
        return copy.deepcopy(_output_schema())


@lru_cache
def _output_schema() -> dict[str, Any]:
    raw = CharacterProfile.model_json_schema()
    return _inline_schema(raw, raw.get("$defs", {}))


def _inline_schema(node: dict[str, Any], defs: dict[str, Any]) -> dict[str, Any]:
    ref = node.get("$ref")
    if ref is not None:
        return _inline_schema(defs[ref.rsplit("/", 1)[-1]], defs)

    out: dict[str, Any] = {}
    for key, value in node.items():
        # "title" 只在 schema 节点层级移除；properties 中名为 title 的字段保留
        if key in ("title", "$defs"):
            continue
        if key == "properties":
            out[key] = {name: _inline_schema(prop, defs) for name, prop in value.items()}
        elif key == "items" and isinstance(value, dict):
            out[key] = _inline_schema(value, defs)
        else:
            out[key] = value

    if out.get("type") == "object" and "properties" in out:
        out["required"] = list(out["properties"])
        out["additionalProperties"] = False
    return out
