"""HTML 页面：输入表单、已保存档案列表、档案详情。

页面层是叶子节点：读取失败只显示通用的错误提示，不向外抛出。
"""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from chara_profile.api.deps import ProfileStoreDep, SettingsDep
from chara_profile.config import Settings
from chara_profile.exceptions import AppException
from chara_profile.services.profile_store import ProfileStore, is_safe_filename

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

MSG_INVALID_FILE = "file パラメータが不正です"
MSG_READ_FAILED = "ファイルの読み込みに失敗しました"

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index_page(request: Request, settings: Settings = SettingsDep):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"api_url": f"{settings.api_prefix.rstrip('/')}/character"},
    )


@router.get("/list", response_class=HTMLResponse)
async def list_page(request: Request, store: ProfileStore = ProfileStoreDep):
    return templates.TemplateResponse(request, "list.html", {"files": store.list()})


@router.get("/detail", response_class=HTMLResponse)
async def detail_page(request: Request, file: str | None = None, store: ProfileStore = ProfileStoreDep):
    if not is_safe_filename(file):
        return templates.TemplateResponse(request, "detail.html", {"error": MSG_INVALID_FILE})

    try:
        profile = store.read(file)
    except AppException as e:
        logger.warning(f"Failed to display profile {file}: {e.code}")
        return templates.TemplateResponse(request, "detail.html", {"error": MSG_READ_FAILED})

    return templates.TemplateResponse(request, "detail.html", {"profile": profile, "file": file})
