from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, TypeVar

from chara_profile.config import Settings
from chara_profile.utils import extract_json

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
REASONING_MODEL_PREFIXES = ("gpt-5", "o1", "o3", "o4")


@dataclass(slots=True)
class ToolCall:
    id: str
    name: str
    input: dict[str, Any]


@dataclass(slots=True)
class LLMResponse:
    tool_calls: list[ToolCall]
    raw: Any


class LLMOutputError(RuntimeError):
    """服务端有响应，但没有给出结构化结果（拒答、截断、未调用工具等）。"""


class StructuredLLM(Protocol):
    async def generate_structured(
        self,
        *,
        system: str,
        prompt: str,
        schema: dict[str, Any],
        schema_name: str,
    ) -> dict[str, Any]: ...

    def is_retryable_error(self, exc: BaseException) -> bool: ...

    async def aclose(self) -> None: ...

def _status_is_retryable(exc: BaseException) -> bool:
    status_code = getattr(exc, "status_code", None)
    return isinstance(status_code, int) and status_code in RETRYABLE_STATUS_CODES


def _sdk_error_types(sdk: Any, names: tuple[str, ...]) -> tuple[type[BaseException], ...]:
    return tuple(t for t in (getattr(sdk, name, None) for name in names) if isinstance(t, type))


async def call_with_retries(
    call: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    is_retryable: Callable[[BaseException], bool],
) -> T:
    """指数退避重试（0.5s 起，翻倍，上限 8s）。max_retries=0 时只调用一次。"""
    delay_s = 0.5
    for attempt in range(max_retries + 1):
        try:
            return await call()
        except Exception as exc:
            if attempt >= max_retries or not is_retryable(exc):
                raise
            logger.warning(f"LLM call failed (attempt {attempt + 1}/{max_retries + 1}), retrying in {delay_s}s: {exc}")
            await asyncio.sleep(delay_s)
            delay_s = min(delay_s * 2, 8.0)

    raise RuntimeError("unreachable")  # pragma: no cover


class LLMService:
    """Claude (Anthropic Messages API) 服务包装器。

    - 直接使用 `anthropic` SDK
    - 结构化输出通过强制工具调用实现：工具的 input_schema 即输出 Schema
    """

    def __init__(self, settings: Settings, *, max_retries: int = 0):
        self.settings = settings
        self.max_retries = max_retries
        self._client: Any | None = None
        self._anthropic: Any | None = None

    def _import_anthropic(self) -> Any:
        if self._anthropic is not None:
            return self._anthropic
        try:
            import anthropic  # type: ignore
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError("Missing dependency `anthropic`. Install: `pip install anthropic`.") from exc
        self._anthropic = anthropic
        return anthropic

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        anthropic = self._import_anthropic()

        api_key = self.settings.anthropic_api_key or self.settings.anthropic_auth_token
        if not api_key:
            raise ValueError("Anthropic credentials missing: set `anthropic_api_key` or `anthropic_auth_token`.")

        kwargs: dict[str, Any] = {
            "api_key": api_key,
            "timeout": self.settings.request_timeout_s,
            # 重试只由外层 max_retries 控制
            "max_retries": 0,
        }
        if self.settings.anthropic_base_url:
            kwargs["base_url"] = self.settings.anthropic_base_url
        default_headers = self.settings.anthropic_default_headers()
        if default_headers:
            kwargs["default_headers"] = default_headers

        self._client = anthropic.AsyncAnthropic(**kwargs)
        return self._client

    async def aclose(self) -> None:
        """关闭 SDK 客户端（释放连接池）"""
        if self._client is not None:
            await self._client.close()
            self._client = None

    def _parse_message(self, message: Any) -> LLMResponse:
        tool_calls: list[ToolCall] = []

        for block in getattr(message, "content", []) or []:
            if getattr(block, "type", None) == "tool_use":
                tool_calls.append(
                    ToolCall(
                        id=str(getattr(block, "id", "")),
                        name=str(getattr(block, "name", "")),
                        input=dict(getattr(block, "input", {}) or {}),
                    )
                )

        return LLMResponse(tool_calls=tool_calls, raw=message)

    def is_retryable_error(self, exc: BaseException) -> bool:
        anthropic = self._import_anthropic()
        retryable_types = _sdk_error_types(anthropic, ("RateLimitError", "APIConnectionError", "APITimeoutError"))
        if retryable_types and isinstance(exc, retryable_types):
            return True
        return _status_is_retryable(exc)

    async def generate(
        self,
        *,
        messages: list[dict[str, Any]],
        system: str,
        tools: list[dict[str, Any]],
        tool_choice: dict[str, Any],
    ) -> LLMResponse:
        client = self._get_client()

        payload: dict[str, Any] = {
            "model": self.settings.anthropic_model,
            "max_tokens": self.settings.max_output_tokens,
            "system": system,
            "messages": messages,
            "tools": tools,
            "tool_choice": tool_choice,
        }

        message = await call_with_retries(
            lambda: client.messages.create(**payload),
            max_retries=self.max_retries,
            is_retryable=self.is_retryable_error,
        )
        return self._parse_message(message)

    async def generate_structured(
        self,
        *,
        system: str,
        prompt: str,
        schema: dict[str, Any],
        schema_name: str,
    ) -> dict[str, Any]:
        # 强制工具调用与 extended thinking 不能同时使用，因此这里不传 reasoning 配置
        tool_name = f"emit_{schema_name}"
        resp = await self.generate(
            messages=[{"role": "user", "content": prompt}],
            system=system,
            tools=[
                {
                    "name": tool_name,
                    "description": f"Return the {schema_name} object. The input must match the schema exactly.",
                    "input_schema": schema,
                }
            ],
            tool_choice={"type": "tool", "name": tool_name},
        )

        stop_reason = getattr(resp.raw, "stop_reason", None)
        if stop_reason == "max_tokens":
            raise LLMOutputError("Structured output truncated: max_tokens reached")
        for call in resp.tool_calls:
            if call.name == tool_name:
                return call.input
        raise LLMOutputError(f"Model did not call `{tool_name}`")


class OpenAILLMService:
    """OpenAI Responses API 包装器。

    结构化输出使用 `text.format = json_schema (strict)`，
    推理模型附带 `reasoning.effort`。
    """

    def __init__(self, settings: Settings, *, max_retries: int = 0):
        self.settings = settings
        self.max_retries = max_retries
        self._client: Any | None = None
        self._openai: Any | None = None

    def _import_openai(self) -> Any:
        if self._openai is not None:
            return self._openai
        try:
            import openai  # type: ignore
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError("Missing dependency `openai`. Install: `pip install openai`.") from exc
        self._openai = openai
        return openai

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        openai = self._import_openai()

        if not self.settings.openai_api_key:
            raise ValueError("OpenAI credentials missing: set `openai_api_key`.")

        kwargs: dict[str, Any] = {
            "api_key": self.settings.openai_api_key,
            "timeout": self.settings.request_timeout_s,
            "max_retries": 0,
        }
        if self.settings.openai_base_url:
            kwargs["base_url"] = self.settings.openai_base_url

        self._client = openai.AsyncOpenAI(**kwargs)
        return self._client

    async def aclose(self) -> None:
        """关闭 SDK 客户端（释放连接池）"""
        if self._client is not None:
            await self._client.close()
            self._client = None

    def is_retryable_error(self, exc: BaseException) -> bool:
        openai = self._import_openai()
        retryable_types = _sdk_error_types(openai, ("RateLimitError", "APIConnectionError", "APITimeoutError"))
        if retryable_types and isinstance(exc, retryable_types):
            return True
        return _status_is_retryable(exc)

    def is_reasoning_model(self, model: str) -> bool:
        return model.startswith(REASONING_MODEL_PREFIXES)

    def build_payload(
        self,
        *,
        system: str,
        prompt: str,
        schema: dict[str, Any],
        schema_name: str,
    ) -> dict[str, Any]:
        model = self.settings.openai_model
        payload: dict[str, Any] = {
            "model": model,
            "instructions": system,
            "input": prompt,
            "max_output_tokens": self.settings.max_output_tokens,
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
        }
        if self.is_reasoning_model(model):
            payload["reasoning"] = {"effort": self.settings.reasoning_effort}
        return payload

    async def generate_structured(
        self,
        *,
        system: str,
        prompt: str,
        schema: dict[str, Any],
        schema_name: str,
    ) -> dict[str, Any]:
        client = self._get_client()
        payload = self.build_payload(system=system, prompt=prompt, schema=schema, schema_name=schema_name)

        response = await call_with_retries(
            lambda: client.responses.create(**payload),
            max_retries=self.max_retries,
            is_retryable=self.is_retryable_error,
        )

        if getattr(response, "status", None) == "incomplete":
            details = getattr(response, "incomplete_details", None)
            raise LLMOutputError(f"Structured output incomplete: {getattr(details, 'reason', 'unknown')}")
        text = getattr(response, "output_text", "") or ""
        if not text.strip():
            raise LLMOutputError("Model returned no structured output")
        try:
            return extract_json(text)
        except ValueError as exc:
            raise LLMOutputError(str(exc)) from exc


def create_llm_service(settings: Settings, *, max_retries: int | None = None) -> LLMService | OpenAILLMService:
    retries = settings.llm_max_retries if max_retries is None else max_retries
    if settings.llm_provider == "anthropic":
        return LLMService(settings, max_retries=retries)
    if settings.llm_provider == "openai":
        return OpenAILLMService(settings, max_retries=retries)
    raise ValueError(f"Unknown llm_provider: {settings.llm_provider}")
