"""
Weixin Publisher
微信公众号发布: access_token 管理、封面素材上传、草稿创建与发布
API 文档: https://developers.weixin.qq.com/doc/offiaccount/Draft_Box/Add_draft.html
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from config import WeixinSettings
from models import PublishResult, PublishStatus
from utils.exceptions import ConfigurationError, PublishError

from .base import ContentPublisher


logger = logging.getLogger(__name__)

# access_token 失效相关错误码, 遇到时刷新 token 重试一次
_TOKEN_ERRCODES = {40001, 40014, 42001}

_TITLE_LIMIT = 64
_DIGEST_LIMIT = 120


class WeixinPublisher(ContentPublisher):
    """微信公众号发布器"""

    def __init__(
        self,
        settings: Optional[WeixinSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.settings = settings or WeixinSettings()
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    @property
    def name(self) -> str:
        return "weixin"

    def is_configured(self) -> bool:
        return bool(self.settings.app_id and self.settings.app_secret)

    @property
    def _base_url(self) -> str:
        return self.settings.base_url.rstrip("/")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
            self._owns_client = True
        return self._client

    async def refresh(self) -> None:
        """丢弃缓存的 access_token, 下次调用重新获取"""
        self._access_token = None
        self._token_expires_at = 0.0
        if self._owns_client:
            await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token
        if not self.is_configured():
            raise ConfigurationError("weixin app_id/app_secret not configured (WEIXIN_APP_ID/WEIXIN_APP_SECRET)")

        payload = await self._call(
            "GET",
            "/cgi-bin/token",
            action="get access token",
            params={
                "grant_type": "client_credential",
                "appid": self.settings.app_id,
                "secret": self.settings.app_secret,
            },
        )
        token = str(payload.get("access_token") or "")
        if not token:
            raise PublishError("weixin token response missing access_token")
        expires_in = int(payload.get("expires_in") or 7200)
        self._access_token = token
        # 提前 5 分钟过期
        self._token_expires_at = time.monotonic() + max(60, expires_in - 300)
        logger.info("[Weixin] access token refreshed, expires_in=%s", expires_in)
        return token

    async def upload_image(self, image_url: str) -> str:
        client = self._get_client()
        try:
            image = await client.get(image_url)
            image.raise_for_status()
        except httpx.HTTPError as e:
            raise PublishError(f"cover download failed: {e}", url=image_url) from e

        content_type = image.headers.get("content-type", "image/png").split(";")[0].strip() or "image/png"
        extension = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/gif": "gif"}.get(content_type, "png")

        payload = await self._call_with_token(
            "POST",
            "/cgi-bin/material/add_material",
            action="upload cover",
            params={"type": "image"},
            files={"media": (f"cover.{extension}", image.content, content_type)},
        )
        media_id = str(payload.get("media_id") or "")
        if not media_id:
            raise PublishError("weixin upload response missing media_id")
        return media_id

    async def publish(self, content: str, title: str, digest: str, thumb_media_id: str) -> PublishResult:
        article = {
            "title": title[:_TITLE_LIMIT],
            "author": self.settings.author,
            "digest": digest[:_DIGEST_LIMIT],
            "content": content,
            "thumb_media_id": thumb_media_id,
            "need_open_comment": 1,
            "only_fans_can_comment": 0,
        }
        draft = await self._call_with_token(
            "POST",
            "/cgi-bin/draft/add",
            action="add draft",
            json_body={"articles": [article]},
        )
        draft_media_id = str(draft.get("media_id") or "")
        if not draft_media_id:
            raise PublishError("weixin draft response missing media_id")

        if self.settings.publish_mode == "draft":
            logger.info("[Weixin] draft saved media_id=%s", draft_media_id)
            return PublishResult(status=PublishStatus.DRAFT, media_id=draft_media_id, article_title=title)

        try:
            submitted = await self._call_with_token(
                "POST",
                "/cgi-bin/freepublish/submit",
                action="submit publish",
                json_body={"media_id": draft_media_id},
            )
        except PublishError as e:
            # 草稿已保存, 发布提交失败不丢弃结果
            logger.warning("[Weixin] publish submit failed, draft kept media_id=%s: %s", draft_media_id, e)
            return PublishResult(
                status=PublishStatus.FAILED,
                media_id=draft_media_id,
                article_title=title,
                error=str(e),
            )

        return PublishResult(
            status=PublishStatus.PUBLISHED,
            media_id=draft_media_id,
            publish_id=str(submitted.get("publish_id") or "") or None,
            article_title=title,
        )

    async def _call_with_token(self, method: str, path: str, *, action: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Dict[str, Any]:
        for attempt in range(2):
            token = await self.get_access_token()
            query = dict(params or {})
            query["access_token"] = token
            try:
                return await self._call(method, path, action=action, params=query, **kwargs)
            except PublishError as e:
                if e.errcode in _TOKEN_ERRCODES and attempt == 0:
                    logger.info("[Weixin] token rejected (errcode=%s), refreshing", e.errcode)
                    self._access_token = None
                    continue
                raise
        raise PublishError(f"weixin {action} failed after token refresh")

    async def _call(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        client = self._get_client()
        request_kwargs: Dict[str, Any] = {"params": params}
        if json_body is not None:
            # 微信接口不解析 \u 转义, 必须以 UTF-8 原文提交
            request_kwargs["content"] = json.dumps(json_body, ensure_ascii=False).encode("utf-8")
            request_kwargs["headers"] = {"Content-Type": "application/json; charset=utf-8"}
        if files is not None:
            request_kwargs["files"] = files

        try:
            response = await client.request(method, f"{self._base_url}{path}", **request_kwargs)
            response.raise_for_status()
            payload = dict(response.json() or {})
        except httpx.HTTPStatusError as e:
            raise PublishError(f"weixin {action} http {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise PublishError(f"weixin {action} request failed: {e}") from e
        except ValueError as e:
            raise PublishError(f"weixin {action} returned invalid json") from e

        errcode = int(payload.get("errcode") or 0)
        if errcode != 0:
            raise PublishError(
                f"weixin {action} failed: {payload.get('errmsg') or 'unknown error'}",
                errcode=errcode,
            )
        return payload
