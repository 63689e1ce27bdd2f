"""NameRequest / CharacterProfile 的校验入口。

两个函数都是纯函数：不做 I/O，失败时一次性返回全部违规项，
而不是只报告第一个。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from chara_profile.schemas.character import CharacterProfile, NameRequest

# pydantic 错误类型 -> 对外暴露的 reason
_REASONS = {
    "missing": "required",
    "required": "required",
    "too_long": "too_long",
    "extra_forbidden": "unknown_field",
    "literal_error": "invalid_enum",
    "string_pattern_mismatch": "invalid_format",
    "greater_than_equal": "out_of_range",
    "less_than_equal": "out_of_range",
}


@dataclass(frozen=True, slots=True)
class SchemaViolation:
    path: str
    reason: str
    message: str


class NameRequestError(ValueError):
    def __init__(self, violations: list[SchemaViolation], details: dict[str, Any]):
        super().__init__("; ".join(f"{v.path or '<root>'}: {v.message}" for v in violations))
        self.violations = violations
        self.details = details


class ProfileValidationError(ValueError):
    def __init__(self, violations: list[SchemaViolation]):
        super().__init__(f"{len(violations)} schema violation(s): " + ", ".join(v.path or "<root>" for v in violations))
        self.violations = violations

    @property
    def paths(self) -> list[str]:
        return [v.path for v in self.violations]


def _path(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


def to_violations(exc: ValidationError) -> list[SchemaViolation]:
    return [
        SchemaViolation(
            path=_path(err["loc"]),
            reason=_REASONS.get(err["type"], "invalid_type" if err["type"].endswith("_type") else err["type"]),
            message=err["msg"],
        )
        for err in exc.errors(include_url=False)
    ]


def flatten_errors(violations: list[SchemaViolation]) -> dict[str, Any]:
    """把违规项整理为 {"form_errors": [...], "field_errors": {field: [...]}}。"""
    form_errors: list[str] = []
    field_errors: dict[str, list[str]] = {}
    for v in violations:
        if not v.path:
            form_errors.append(v.message)
            continue
        field = v.path.split(".", 1)[0]
        field_errors.setdefault(field, []).append(v.message)
    return {"form_errors": form_errors, "field_errors": field_errors}


def validate_name_request(raw: Any) -> NameRequest:
    try:
        return NameRequest.model_validate(raw)
    except ValidationError as exc:
        violations = to_violations(exc)
        raise NameRequestError(violations, flatten_errors(violations)) from exc


def validate_profile(candidate: Any) -> CharacterProfile:
    if isinstance(candidate, CharacterProfile):
        candidate = candidate.model_dump()
    try:
        return CharacterProfile.model_validate(candidate)
    except ValidationError as exc:
        raise ProfileValidationError(to_violations(exc)) from exc
