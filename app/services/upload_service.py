"""上传服务：有对象存储时写入对象存储并返回预签名 URL；
否则写入内存暂存（TempAssetCache），返回指向本服务的临时 URL。
"""
from __future__ import annotations

import time
from datetime import timedelta
from typing import Dict, Optional, Tuple

from werkzeug.utils import secure_filename

from ..errors import InvalidPayload, StorageUnavailable
from ..temp_asset_cache import TempAssetCache
from ..utils.logging_utils import get_logger
from .storage_service import ObjectStorageService

logger = get_logger("upload")

IMAGE_TEMP_PATH = "/api/upload/image-temp/"
AUDIO_TEMP_PATH = "/api/upload/audio-temp/"


class UploadService:
    """图片 / 音频上传，对象存储优先，内存暂存兜底。"""

    def __init__(
        self,
        temp_assets: TempAssetCache,
        storage: Optional[ObjectStorageService] = None,
        image_url_expires: timedelta = timedelta(days=7),
        audio_url_expires: timedelta = timedelta(hours=1),
    ):
        self.temp_assets = temp_assets
        self.storage = storage
        self.image_url_expires = image_url_expires
        self.audio_url_expires = audio_url_expires

    @classmethod
    def from_app(cls, app) -> "UploadService":
        return cls(
            temp_assets=app.extensions["temp_assets"],
            storage=app.extensions.get("object_storage"),
            image_url_expires=timedelta(days=app.config.get("IMAGE_URL_EXPIRES_DAYS", 7)),
            audio_url_expires=timedelta(seconds=app.config.get("AUDIO_URL_EXPIRES_SECONDS", 3600)),
        )

    def _require_storage(self) -> ObjectStorageService:
        if self.storage is None:
            raise StorageUnavailable("对象存储未配置，请在服务端设置 OBJECT_STORAGE_* 环境变量")
        return self.storage

    @staticmethod
    def _object_name(prefix: str, file_name: str) -> str:
        return f"{prefix}/{int(time.time() * 1000)}-{secure_filename(file_name) or 'file'}"

    @staticmethod
    def _temp_url_prefix(base_url: Optional[str], path: str) -> str:
        if not base_url:
            raise StorageUnavailable("对象存储未配置且无法生成临时 URL")
        return f"{base_url.rstrip('/')}{path}"

    # ===================== 图片 =====================

    def upload_image(
        self,
        data: bytes,
        base_url: Optional[str] = None,
        file_name: Optional[str] = None,
        mime_type: str = "image/jpeg",
    ) -> Dict[str, str]:
        """上传图片，返回 {key, url}。"""
        if not data:
            raise InvalidPayload("文件不存在")
        file_name = file_name or f"image-{int(time.time() * 1000)}.jpg"
        if self.storage is not None:
            key = self.storage.upload_bytes(data, self._object_name("account-images", file_name), mime_type)
            url = self.storage.presigned_url(key, self.image_url_expires)
            return {"key": key, "url": url}

        prefix = self._temp_url_prefix(base_url, IMAGE_TEMP_PATH)
        asset_id = self.temp_assets.store_image(data, mime_type)
        url = f"{prefix}{asset_id}"
        logger.info(f"Image stored in memory, temp url: {url}")
        return {"key": asset_id, "url": url}

    def get_temp_image(self, asset_id: str) -> Tuple[bytes, str]:
        return self.temp_assets.retrieve_image(asset_id)

    # ===================== 音频 =====================

    def upload_audio_from_buffer(
        self,
        data: bytes,
        base_url: Optional[str] = None,
        file_name: Optional[str] = None,
        mime_type: str = "audio/wav",
    ) -> Dict[str, str]:
        """上传录音（来自 base64 body）。无对象存储时走内存暂存，URL 仅可拉取一次。"""
        if not data:
            raise InvalidPayload("文件不存在")
        file_name = file_name or f"record-{int(time.time() * 1000)}.wav"
        if self.storage is not None:
            return self._upload_audio_to_storage(data, file_name, mime_type)

        prefix = self._temp_url_prefix(base_url, AUDIO_TEMP_PATH)
        asset_id = self.temp_assets.store_audio(data)
        url = f"{prefix}{asset_id}"
        logger.info(f"Audio stored in memory, temp url: {url}")
        return {"key": asset_id, "url": url}

    def upload_audio(self, data: bytes, file_name: str, mime_type: str) -> Dict[str, str]:
        """上传录音文件（multipart），仅支持对象存储。"""
        self._require_storage()
        if not data:
            raise InvalidPayload("文件不存在")
        logger.info(f"Uploading audio {file_name} ({len(data)} bytes)")
        return self._upload_audio_to_storage(data, file_name, mime_type)

    def _upload_audio_to_storage(self, data: bytes, file_name: str, mime_type: str) -> Dict[str, str]:
        storage = self._require_storage()
        key = storage.upload_bytes(data, self._object_name("account-audio", file_name), mime_type)
        url = storage.presigned_url(key, self.audio_url_expires)
        return {"key": key, "url": url}

    def claim_temp_audio(self, asset_id: str) -> bytes:
        return self.temp_assets.retrieve_and_remove_audio(asset_id)
