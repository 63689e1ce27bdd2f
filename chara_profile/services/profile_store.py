"""已保存角色档案的读取（列表 / 详情）"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

from chara_profile.exceptions import InvalidFilenameError, ProfileNotFoundError, ProfileReadError
from chara_profile.schemas.character import CharacterProfile
from chara_profile.schemas.validation import ProfileValidationError, validate_profile

logger = logging.getLogger(__name__)

SAFE_FILENAME = re.compile(r"^[\w-]+\.json$", re.ASCII)


def is_safe_filename(filename: str | None) -> bool:
    return bool(filename) and SAFE_FILENAME.fullmatch(filename) is not None


class ProfileStore(Protocol):
    def list(self) -> list[str]: ...

    def read(self, filename: str) -> CharacterProfile: ...


class DirectoryProfileStore:
    """从目录中读取 *.json 档案，文件名按名称倒序（新文件在前）。"""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def list(self) -> list[str]:
        try:
            names = [p.name for p in self.directory.iterdir() if is_safe_filename(p.name) and p.is_file()]
        except OSError:
            logger.debug(f"Profiles directory not readable, skipping: {self.directory}")
            return []
        return sorted(names, reverse=True)

    def read(self, filename: str) -> CharacterProfile:
        if not is_safe_filename(filename):
            raise InvalidFilenameError(filename)

        path = self.directory / filename
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as e:
            raise ProfileNotFoundError(filename) from e
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load profile {path}: {e}")
            raise ProfileReadError(filename, type(e).__name__) from e
        return _validated(filename, data)


class InMemoryProfileStore:
    def __init__(self, profiles: dict[str, Any] | None = None):
        self.profiles = dict(profiles or {})

    def list(self) -> list[str]:
        return sorted((name for name in self.profiles if is_safe_filename(name)), reverse=True)

    def read(self, filename: str) -> CharacterProfile:
        if not is_safe_filename(filename):
            raise InvalidFilenameError(filename)
        if filename not in self.profiles:
            raise ProfileNotFoundError(filename)
        return _validated(filename, self.profiles[filename])


def _validated(filename: str, data: Any) -> CharacterProfile:
    try:
        return validate_profile(data)
    except ProfileValidationError as e:
        logger.warning(f"Saved profile {filename} violates schema: {e.paths}")
        raise ProfileReadError(filename, "schema_violation") from e
