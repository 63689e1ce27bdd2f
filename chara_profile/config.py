from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Note: do not hardcode env_file here; tests instantiate Settings() directly and
    # should not implicitly read the repo's .env. Runtime uses get_settings().
    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "chara-profile"
    environment: str = Field(default="dev", description="dev|staging|prod|development")
    log_level: str = Field(default="INFO", description="Uvicorn log level")

    api_prefix: str = "/api"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # ============================================
    # LLM 服务（结构化输出）
    # ============================================
    llm_provider: Literal["anthropic", "openai"] = Field(
        default="anthropic",
        description="生成服务提供商：anthropic 或 openai",
    )

    anthropic_api_key: str | None = None
    anthropic_auth_token: str | None = Field(
        default=None,
        description="中转站 Token（使用 Bearer 鉴权的代理）",
    )
    anthropic_base_url: str | None = Field(
        default=None,
        description="Anthropic 中转站/代理地址，例如 https://your-proxy.example.com",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-5-20250929",
        description="Claude 模型名称",
    )

    openai_api_key: str | None = None
    openai_base_url: str | None = Field(
        default=None,
        description="OpenAI 兼容接口地址（留空使用官方地址）",
    )
    openai_model: str = Field(default="gpt-5", description="OpenAI 模型名称")

    reasoning_effort: Literal["minimal", "low", "medium", "high"] = Field(
        default="low",
        description="推理强度（仅对 OpenAI 推理模型生效）",
    )
    max_output_tokens: int = Field(default=16000, ge=1)

    request_timeout_s: float = Field(default=120.0, gt=0, description="单次生成调用的等待上限（秒）")
    llm_max_retries: int = Field(
        default=0,
        ge=0,
        description="可重试错误的重试次数，0 表示只调用一次",
    )

    # ============================================
    # 已保存的角色档案
    # ============================================
    profiles_dir: Path = Field(
        default=Path("data/profiles"),
        description="已保存角色档案（*.json）所在目录",
    )

    def anthropic_default_headers(self) -> dict[str, str]:
        """Anthropic 请求头（兼容使用 Bearer Token 的中转站）"""
        headers: dict[str, str] = {}
        if self.anthropic_auth_token:
            headers["Authorization"] = f"Bearer {self.anthropic_auth_token}"
        return headers


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=".env", _env_file_encoding="utf-8")
