"""
语音识别服务

将录音（URL 或内联 base64）转发给第三方 ASR 服务，返回识别文本。
上游返回 503（服务繁忙）时按指数退避重试，其它错误直接上报。
"""
from __future__ import annotations

import time
from typing import Any, Dict, Mapping, Optional

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import UpstreamServiceError
from ..utils.logging_utils import get_logger, performance_logger

logger = get_logger("asr")

# 透传给上游的链路追踪头
FORWARD_HEADERS = ("x-request-id", "x-tt-logid", "traceparent")


class ServiceBusyError(Exception):
    """上游返回 503"""


class SpeechRecognitionService:
    """ASR HTTP 客户端"""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        path: str = "/v1/audio/recognize",
        timeout: int = 60,
        max_attempts: int = 3,
        backoff: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.url = f"{base_url.rstrip('/')}{path}"
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.backoff = backoff
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "SpeechRecognitionService":
        return cls(
            api_key=config.get("AI_API_KEY", ""),
            base_url=config.get("AI_BASE_URL", ""),
            path=config.get("ASR_PATH", "/v1/audio/recognize"),
            timeout=config.get("AI_REQUEST_TIMEOUT", 60),
            max_attempts=config.get("ASR_MAX_ATTEMPTS", 3),
            backoff=config.get("ASR_RETRY_BACKOFF", 1.0),
        )

    @staticmethod
    def extract_forward_headers(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
        if not headers:
            return {}
        lowered = {k.lower(): v for k, v in headers.items()}
        return {name: lowered[name] for name in FORWARD_HEADERS if name in lowered}

    def recognize(
        self,
        audio_url: Optional[str] = None,
        audio_base64: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        """识别语音，优先使用内联 base64（临时 URL 只能被拉取一次）。"""
        if not audio_url and not audio_base64:
            raise ValueError("请提供 audioUrl 或 audioBase64")
        if not self.api_key:
            raise UpstreamServiceError("语音识别需配置 AI_API_KEY", status_code=503)

        payload = {"base64_data": audio_base64} if audio_base64 else {"url": audio_url}
        request_headers = {"Authorization": f"Bearer {self.api_key}"}
        request_headers.update(self.extract_forward_headers(headers))

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff, max=10),
            retry=retry_if_exception_type(ServiceBusyError),
            reraise=True,
        )
        try:
            body = retrying(self._post, payload, request_headers)
        except ServiceBusyError:
            logger.warning(f"ASR still busy after {self.max_attempts} attempts")
            raise UpstreamServiceError("服务繁忙，请稍后重试", status_code=503)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"语音识别失败: {e}")
            raise UpstreamServiceError(f"语音识别失败: {e}", status_code=400)

        # 结果可能包在 data 里，也可能直接平铺；data 为 null 视为格式错误
        result = body.get("data", body) if isinstance(body, dict) else None
        if not isinstance(result, dict):
            logger.error(f"语音识别失败: unexpected response {body!r}")
            raise UpstreamServiceError("语音识别失败: 响应格式错误", status_code=400)
        text = result.get("text") or ""
        logger.info(f"语音识别结果: {text}")
        return {"text": text, "duration": result.get("duration")}

    def _post(self, payload: Dict[str, Any], headers: Dict[str, str]) -> Any:
        start = time.perf_counter()
        response = self.session.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        performance_logger.log_upstream_call(
            "asr", "recognize", (time.perf_counter() - start) * 1000, response.status_code
        )
        if response.status_code == 503:
            raise ServiceBusyError()
        response.raise_for_status()
        return response.json()
