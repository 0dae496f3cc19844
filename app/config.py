"""应用配置。
可通过环境变量覆盖，默认使用 SQLite 本地文件；对象存储与 AI 服务未配置时自动降级。
"""
from __future__ import annotations
import os
from pathlib import Path


class Config:
    BASE_DIR: Path = Path(__file__).resolve().parent.parent  # 项目根目录
    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret")
    DATA_DIR: str = os.environ.get("DATA_DIR", str((BASE_DIR / "data").resolve()))
    # 绝对路径 SQLite，注意 Windows 需使用正斜杠
    _default_db_path = str((Path(DATA_DIR) / "ledger.sqlite").resolve()).replace("\\", "/")
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("DATABASE_URL", f"sqlite:///{_default_db_path}")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    MAX_CONTENT_LENGTH: int = 20 * 1024 * 1024  # 20MB

    # 对外访问地址，用于拼接临时资源 URL；为空时取请求的 host_url
    PUBLIC_URL: str | None = os.environ.get("PUBLIC_URL")

    # 对象存储（S3 兼容，minio 客户端）；endpoint 与 bucket 同时配置才启用
    OBJECT_STORAGE_ENDPOINT: str | None = os.environ.get("OBJECT_STORAGE_ENDPOINT")
    OBJECT_STORAGE_BUCKET: str | None = os.environ.get("OBJECT_STORAGE_BUCKET")
    OBJECT_STORAGE_ACCESS_KEY: str = os.environ.get("OBJECT_STORAGE_ACCESS_KEY", "")
    OBJECT_STORAGE_SECRET_KEY: str = os.environ.get("OBJECT_STORAGE_SECRET_KEY", "")
    OBJECT_STORAGE_REGION: str = os.environ.get("OBJECT_STORAGE_REGION", "cn-beijing")
    OBJECT_STORAGE_SECURE: bool = os.environ.get("OBJECT_STORAGE_SECURE", "true").lower() == "true"
    IMAGE_URL_EXPIRES_DAYS: int = int(os.environ.get("IMAGE_URL_EXPIRES_DAYS", "7"))
    AUDIO_URL_EXPIRES_SECONDS: int = int(os.environ.get("AUDIO_URL_EXPIRES_SECONDS", "3600"))

    # 无对象存储时的内存暂存
    TEMP_AUDIO_TTL_SECONDS: float = float(os.environ.get("TEMP_AUDIO_TTL_SECONDS", str(5 * 60)))
    TEMP_IMAGE_TTL_SECONDS: float = float(os.environ.get("TEMP_IMAGE_TTL_SECONDS", str(30 * 60)))

    # AI 服务（语音识别 + 大模型），共用一个 API Key
    AI_API_KEY: str = os.environ.get("AI_API_KEY", "").strip()
    AI_BASE_URL: str = os.environ.get("AI_BASE_URL", "https://api.coze.com")
    AI_MODEL_BASE_URL: str = os.environ.get("AI_MODEL_BASE_URL", "https://model.coze.com")
    AI_REQUEST_TIMEOUT: int = int(os.environ.get("AI_REQUEST_TIMEOUT", "60"))

    ASR_PATH: str = os.environ.get("ASR_PATH", "/v1/audio/recognize")
    ASR_MAX_ATTEMPTS: int = int(os.environ.get("ASR_MAX_ATTEMPTS", "3"))
    ASR_RETRY_BACKOFF: float = float(os.environ.get("ASR_RETRY_BACKOFF", "1.0"))

    LLM_TEXT_MODEL: str = os.environ.get("LLM_TEXT_MODEL", "doubao-seed-2-0-lite-260215")
    LLM_VISION_MODEL: str = os.environ.get("LLM_VISION_MODEL", "doubao-seed-1-6-vision-250815")
    LLM_TEMPERATURE: float = float(os.environ.get("LLM_TEMPERATURE", "0.2"))

    # Swagger
    SWAGGER = {
        "title": "记账小程序 API",
        "uiversion": 3,
        "openapi": "3.0.2",
    }
