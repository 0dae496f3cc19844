"""领域异常定义，由蓝图或全局 errorhandler 转换为统一响应信封。"""
from __future__ import annotations


class AssetNotFound(KeyError):
    """临时资源不存在、已过期或已被取走。三者对调用方不作区分。"""

    def __init__(self, asset_id: str):
        super().__init__(asset_id)
        self.asset_id = asset_id

    def __str__(self) -> str:
        return f"temporary asset not found: {self.asset_id}"


class InvalidPayload(ValueError):
    """上传内容为空或无法解码。"""


class StorageUnavailable(RuntimeError):
    """对象存储未配置，且无法退化到内存暂存。"""

    status_code = 503


class UpstreamServiceError(RuntimeError):
    """第三方 AI / 语音识别服务调用失败。"""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code
