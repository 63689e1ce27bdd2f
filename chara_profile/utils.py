"""通用工具函数。"""
from __future__ import annotations

import json


def extract_json(text: str) -> dict:
    """从 LLM 文本响应中提取 JSON 对象（容忍 markdown 代码块和前后说明文字）。

    只做提取，不修补缺失字段或截断的内容。
    """
    text = text.strip()

    # 移除可能的 markdown 代码块标记
    if text.startswith("```"):
        lines = text.split("\n")
        # 移除开头的 ```json 或 ```
        if lines[0].startswith("```"):
            lines = lines[1:]
        # 移除结尾的 ```
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()

    # 尝试直接解析；合法 JSON 但不是对象时直接拒绝
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        pass
    else:
        if not isinstance(data, dict):
            raise ValueError("LLM 响应中未找到 JSON 对象")
        return data

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("LLM 响应中未找到 JSON 对象")

    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ValueError(f"无法解析 LLM 响应的 JSON: {text[start:start + 200]}...") from exc
    if not isinstance(data, dict):
        raise ValueError("LLM 响应中未找到 JSON 对象")
    return data
