"""应用异常定义。

所有异常由 `main.create_app()` 中注册的处理器统一转换为
`{"ok": false, "error": ..., "code": ...}` 形式的 JSON 响应。
"""
from __future__ import annotations

from typing import Any


class AppException(Exception):
    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"ok": False, "error": self.message, "code": self.code}
        if self.details is not None:
            content["details"] = self.details
        return content


class BadRequestError(AppException):
    """请求体不是合法 JSON"""

    code = "BAD_REQUEST"
    status_code = 400

    def __init__(self, message: str = "Invalid JSON body") -> None:
        super().__init__(message)


class InvalidInputError(AppException):
    """输入不满足 NameRequest 约束，details 为扁平化后的全部错误"""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, details: dict[str, Any]) -> None:
        super().__init__("Validation error", details=details)


class InvalidFilenameError(AppException):
    code = "INVALID_FILENAME"
    status_code = 400

    def __init__(self, filename: str) -> None:
        super().__init__("Invalid file parameter", details={"file": filename})


class GenerationFailedError(AppException):
    """生成失败。retryable 区分“稍后重试”与“需要上报”。"""

    code = "GENERATION_FAILED"
    status_code = 502
    retryable: bool = False

    def __init__(
        self,
        message: str = "Generation failed",
        *,
        retryable: bool | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        if retryable is not None:
            self.retryable = retryable

    def to_content(self) -> dict[str, Any]:
        content = super().to_content()
        content["retryable"] = self.retryable
        return content


class ProviderUnavailableError(GenerationFailedError):
    """生成服务不可达、超时或限流（暂时性错误）"""

    code = "PROVIDER_UNAVAILABLE"
    status_code = 503
    retryable = True


class NonConformingOutputError(GenerationFailedError):
    """生成服务返回了不符合档案结构的数据"""

    code = "NONCONFORMING_OUTPUT"
    status_code = 502
    retryable = False


class ProfileNotFoundError(AppException):
    code = "PROFILE_NOT_FOUND"
    status_code = 404

    def __init__(self, filename: str) -> None:
        super().__init__("Profile not found", details={"file": filename})


class ProfileReadError(AppException):
    code = "PROFILE_READ_ERROR"
    status_code = 422

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__("Failed to read profile", details={"file": filename, "reason": reason})
