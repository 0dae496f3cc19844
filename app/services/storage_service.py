"""
对象存储服务（S3 兼容，minio 客户端）
上传账单图片 / 录音并生成预签名访问 URL
"""
from __future__ import annotations

import time
from datetime import timedelta
from io import BytesIO
from typing import Optional
from urllib.parse import urlparse

from minio import Minio
from minio.error import S3Error

from ..utils.logging_utils import get_logger, performance_logger

logger = get_logger("storage")


class ObjectStorageService:
    """S3 兼容对象存储"""

    def __init__(
        self,
        endpoint: str,
        bucket_name: str,
        access_key: str = "",
        secret_key: str = "",
        region: Optional[str] = None,
        secure: bool = True,
    ):
        # endpoint 既可写 host:port，也可写完整 URL
        parsed = urlparse(endpoint if "://" in endpoint else f"//{endpoint}")
        self.endpoint = parsed.netloc or endpoint
        self.secure = parsed.scheme == "https" if parsed.scheme else secure
        self.bucket_name = bucket_name
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self._client: Optional[Minio] = None

    @classmethod
    def from_config(cls, config) -> Optional["ObjectStorageService"]:
        """endpoint 与 bucket 均配置时返回实例，否则返回 None（走内存暂存）。"""
        endpoint = config.get("OBJECT_STORAGE_ENDPOINT")
        bucket = config.get("OBJECT_STORAGE_BUCKET")
        if not endpoint or not bucket:
            return None
        return cls(
            endpoint=endpoint,
            bucket_name=bucket,
            access_key=config.get("OBJECT_STORAGE_ACCESS_KEY", ""),
            secret_key=config.get("OBJECT_STORAGE_SECRET_KEY", ""),
            region=config.get("OBJECT_STORAGE_REGION"),
            secure=config.get("OBJECT_STORAGE_SECURE", True),
        )

    @property
    def client(self) -> Minio:
        """获取 minio 客户端实例"""
        if self._client is None:
            self._client = Minio(
                self.endpoint,
                access_key=self.access_key,
                secret_key=self.secret_key,
                region=self.region,
                secure=self.secure,
            )
        return self._client

    def upload_bytes(self, data: bytes, object_name: str, content_type: str) -> str:
        """上传内容，返回对象键"""
        start = time.perf_counter()
        try:
            self.client.put_object(
                bucket_name=self.bucket_name,
                object_name=object_name,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
            )
        except S3Error as e:
            logger.error(f"Object upload failed: {object_name}: {e}")
            raise
        performance_logger.log_upstream_call(
            "object_storage", "put_object", (time.perf_counter() - start) * 1000
        )
        logger.info(f"Object uploaded: {object_name} ({len(data)} bytes)")
        return object_name

    def presigned_url(self, object_name: str, expires: timedelta) -> str:
        """获取预签名下载 URL"""
        try:
            return self.client.presigned_get_object(self.bucket_name, object_name, expires=expires)
        except S3Error as e:
            logger.error(f"Failed to generate presigned URL: {e}")
            raise
