"""AI 解析 API：
- POST /api/ai/parse-voice {text}      语音文本 -> 账单字段
- POST /api/ai/parse-image {imageUrl}  账单图片 -> 账单字段列表
"""
from __future__ import annotations

from flask import Blueprint, current_app, request

from ..services.ai_service import AIService
from ..utils.helpers import api_error, api_response
from ..utils.logging_utils import get_logger

bp = Blueprint("ai", __name__)
logger = get_logger("ai")


@bp.route("/api/ai/parse-voice", methods=["POST"])
def parse_voice():
    body = request.get_json(silent=True) or {}
    text = str(body.get("text") or "").strip()
    logger.info(f"POST /api/ai/parse-voice - 语音解析 {text}")
    if not text:
        return api_error(400, "缺少 text")
    return api_response(AIService.from_config(current_app.config).parse_voice_to_account(text))


@bp.route("/api/ai/parse-image", methods=["POST"])
def parse_image():
    body = request.get_json(silent=True) or {}
    image_url = str(body.get("imageUrl") or "").strip()
    logger.info(f"POST /api/ai/parse-image - 图片识别 {image_url}")
    if not image_url:
        return api_error(400, "缺少 imageUrl")
    return api_response(AIService.from_config(current_app.config).parse_image_to_accounts(image_url))
