from __future__ import annotations

import json
from functools import lru_cache

from chara_profile.schemas.character import CharacterProfile

OUTPUT_LANGUAGE = "ja"

_TEMPLATE = """# 目的
与えられたキャラクター名から推論してキャラクター情報を正規化し、下記のスキーマのJSONを出力してください。

# 方針
- 出力言語は日本語（"meta.language":"{language}"）とします
- キーの順序はスキーマ順を維持。未定義のキーは追加しません。重複キーは禁止。
- すべての項目は必須です。不明な項目も省略せず、推測できる範囲で埋めてください。
- relationships[].metrics の各値は 0 以上 1 以下の数値です。
- meta.updated_at はタイムゾーン付きの ISO-8601（例: 2025-01-01T12:00:00+09:00）、story.timeline[].date は YYYY-MM-DD 形式です。

# スキーマ
{schema}
"""


@lru_cache
def build_system_prompt() -> str:
    """系统提示词：嵌入由 CharacterProfile 派生的 Schema，避免两份定义漂移。"""
    schema = json.dumps(CharacterProfile.output_schema(), ensure_ascii=False, indent=2)
    return _TEMPLATE.format(language=OUTPUT_LANGUAGE, schema=schema)
