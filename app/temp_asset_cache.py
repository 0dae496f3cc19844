"""临时资源内存暂存（无对象存储时的 fallback）。

- 音频：取一次即删除，供语音识别服务按 URL 拉取
- 图片：过期前可重复读取，供客户端展示
- 每条记录在写入时登记一个 APScheduler 一次性任务，到期自动清除；
  记录被其它路径移除时同步取消该任务

用法：
    cache = TempAssetCache(scheduler)
    asset_id = cache.store_audio(b"RIFF...")
    data = cache.retrieve_and_remove_audio(asset_id)
"""
from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional, Tuple

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler

from .errors import AssetNotFound, InvalidPayload

logger = logging.getLogger("app.temp_assets")

AUDIO_MIME_TYPE = "audio/wav"


class AssetKind(Enum):
    """资源种类：共享存储与过期机制，仅读取策略不同。"""

    AUDIO = ("temp", True)
    IMAGE = ("img", False)

    def __init__(self, prefix: str, consume_on_read: bool):
        self.prefix = prefix
        self.consume_on_read = consume_on_read


@dataclass(frozen=True)
class CacheEntry:
    id: str
    kind: AssetKind
    payload: bytes
    mime_type: str
    expires_at: float  # time.monotonic() 截止时刻
    created_at: datetime = field(default_factory=datetime.utcnow)

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (time.monotonic() if now is None else now) >= self.expires_at


class TempAssetCache:
    """进程内临时资源缓存，按 Flask 扩展方式初始化。"""

    DEFAULT_AUDIO_TTL = 5 * 60
    DEFAULT_IMAGE_TTL = 30 * 60

    def __init__(
        self,
        scheduler: BaseScheduler,
        audio_ttl: float = DEFAULT_AUDIO_TTL,
        image_ttl: float = DEFAULT_IMAGE_TTL,
    ):
        self.scheduler = scheduler
        self.audio_ttl = audio_ttl
        self.image_ttl = image_ttl
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def init_app(self, app) -> None:
        self.audio_ttl = float(app.config.get("TEMP_AUDIO_TTL_SECONDS", self.DEFAULT_AUDIO_TTL))
        self.image_ttl = float(app.config.get("TEMP_IMAGE_TTL_SECONDS", self.DEFAULT_IMAGE_TTL))
        app.extensions["temp_assets"] = self

    # ===================== 音频 =====================

    def store_audio(self, payload: bytes, ttl: Optional[float] = None) -> str:
        return self._store(AssetKind.AUDIO, payload, AUDIO_MIME_TYPE, self.audio_ttl if ttl is None else ttl)

    def retrieve_and_remove_audio(self, asset_id: str) -> bytes:
        """取出音频并删除；第二次调用必然 AssetNotFound。"""
        return self._take(asset_id, AssetKind.AUDIO).payload

    # ===================== 图片 =====================

    def store_image(self, payload: bytes, mime_type: str, ttl: Optional[float] = None) -> str:
        return self._store(AssetKind.IMAGE, payload, mime_type, self.image_ttl if ttl is None else ttl)

    def retrieve_image(self, asset_id: str) -> Tuple[bytes, str]:
        entry = self._take(asset_id, AssetKind.IMAGE)
        return entry.payload, entry.mime_type

    # ===================== 内部实现 =====================

    def _store(self, kind: AssetKind, payload: bytes, mime_type: str, ttl: float) -> str:
        if not payload:
            raise InvalidPayload("文件不存在")
        asset_id = self._new_id(kind)
        entry = CacheEntry(
            id=asset_id,
            kind=kind,
            payload=bytes(payload),
            mime_type=mime_type,
            expires_at=time.monotonic() + ttl,
        )
        with self._lock:
            self._entries[asset_id] = entry
        # 先写入再登记过期任务，任务触发时记录一定已存在
        self.scheduler.add_job(
            self._expire,
            "date",
            run_date=datetime.now() + timedelta(seconds=ttl),
            args=[asset_id],
            id=self._job_id(asset_id),
            misfire_grace_time=None,
            replace_existing=True,
        )
        logger.debug(f"Stored {kind.name.lower()} asset {asset_id} ({len(entry.payload)} bytes, ttl={ttl}s)")
        return asset_id

    def _take(self, asset_id: str, kind: AssetKind) -> CacheEntry:
        removed = False
        with self._lock:
            entry = self._entries.get(asset_id)
            if entry is None or entry.kind is not kind:
                raise AssetNotFound(asset_id)
            if entry.is_expired():
                del self._entries[asset_id]
                removed = True
                entry = None
            elif kind.consume_on_read:
                del self._entries[asset_id]
                removed = True
        if removed:
            self._cancel_expiry(asset_id)
        if entry is None:
            raise AssetNotFound(asset_id)
        return entry

    def _expire(self, asset_id: str) -> None:
        with self._lock:
            entry = self._entries.pop(asset_id, None)
        if entry is not None:
            logger.debug(f"Temporary asset {asset_id} expired")

    def _cancel_expiry(self, asset_id: str) -> None:
        try:
            self.scheduler.remove_job(self._job_id(asset_id))
        except JobLookupError:
            # 任务已触发或已移除
            pass

    @staticmethod
    def _job_id(asset_id: str) -> str:
        return f"temp-asset-expire:{asset_id}"

    @staticmethod
    def _new_id(kind: AssetKind) -> str:
        return f"{kind.prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"

    def clear(self) -> None:
        with self._lock:
            ids = list(self._entries)
            self._entries.clear()
        for asset_id in ids:
            self._cancel_expiry(asset_id)

    def __contains__(self, asset_id: object) -> bool:
        with self._lock:
            return asset_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
