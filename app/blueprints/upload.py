"""上传与语音识别 API：
- POST /api/upload/image (multipart: file)
- POST /api/upload/image-base64 {imageBase64, mimeType?}
- GET  /api/upload/image-temp/<id>  无对象存储时的临时图片，过期前可重复读取
- POST /api/upload/audio (multipart: audio) 仅对象存储
- POST /api/upload/audio-base64 {audioBase64}  绕过小程序 uploadFile 域名限制
- GET  /api/upload/audio-temp/<id>  供 ASR 拉取，取一次即删除
- POST /api/asr/recognize {audioUrl?, audioBase64?}
"""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request

from ..errors import AssetNotFound, InvalidPayload
from ..services.speech_service import SpeechRecognitionService
from ..services.upload_service import UploadService
from ..temp_asset_cache import AUDIO_MIME_TYPE
from ..utils.helpers import api_error, api_response, decode_base64_payload, public_base_url
from ..utils.logging_utils import get_logger

bp = Blueprint("upload", __name__)
logger = get_logger("upload")


def _upload_service() -> UploadService:
    return UploadService.from_app(current_app)


@bp.route("/api/upload/image", methods=["POST"])
def upload_image():
    f = request.files.get("file")
    if f is None:
        return api_error(400, "文件不存在")
    data = f.read()
    logger.info(f"POST /api/upload/image - {f.filename} {len(data)} bytes {f.mimetype}")
    try:
        result = _upload_service().upload_image(
            data, public_base_url(), file_name=f.filename, mime_type=f.mimetype or "image/jpeg"
        )
    except InvalidPayload as e:
        return api_error(400, str(e))
    return api_response(result)


@bp.route("/api/upload/image-base64", methods=["POST"])
def upload_image_base64():
    body = request.get_json(silent=True) or {}
    if not body.get("imageBase64"):
        return api_error(400, "缺少 imageBase64")
    try:
        data = decode_base64_payload(body["imageBase64"])
        result = _upload_service().upload_image(
            data, public_base_url(), mime_type=body.get("mimeType") or "image/jpeg"
        )
    except InvalidPayload as e:
        return api_error(400, str(e))
    return api_response(result)


@bp.route("/api/upload/image-temp/<string:asset_id>")
def get_temp_image(asset_id: str):
    try:
        data, mime_type = _upload_service().get_temp_image(asset_id)
    except AssetNotFound:
        return api_error(404, "not found")
    return Response(data, mimetype=mime_type)


@bp.route("/api/upload/audio", methods=["POST"])
def upload_audio():
    f = request.files.get("audio")
    if f is None:
        return api_error(400, "文件不存在")
    data = f.read()
    logger.info(f"POST /api/upload/audio - {f.filename} {len(data)} bytes {f.mimetype}")
    try:
        result = _upload_service().upload_audio(data, f.filename or "record.wav", f.mimetype or AUDIO_MIME_TYPE)
    except InvalidPayload as e:
        return api_error(400, str(e))
    return api_response(result)


@bp.route("/api/upload/audio-base64", methods=["POST"])
def upload_audio_base64():
    body = request.get_json(silent=True) or {}
    if not body.get("audioBase64"):
        return api_error(400, "缺少 audioBase64")
    try:
        data = decode_base64_payload(body["audioBase64"])
        result = _upload_service().upload_audio_from_buffer(data, public_base_url())
    except InvalidPayload as e:
        return api_error(400, str(e))
    return api_response(result)


@bp.route("/api/upload/audio-temp/<string:asset_id>")
def get_temp_audio(asset_id: str):
    try:
        data = _upload_service().claim_temp_audio(asset_id)
    except AssetNotFound:
        return api_error(404, "not found")
    return Response(data, mimetype=AUDIO_MIME_TYPE)


@bp.route("/api/asr/recognize", methods=["POST"])
def recognize():
    body = request.get_json(silent=True) or {}
    audio_url = body.get("audioUrl")
    audio_base64 = body.get("audioBase64")
    logger.info(f"POST /api/asr/recognize - audioUrl={audio_url} base64={'yes' if audio_base64 else 'no'}")
    try:
        result = SpeechRecognitionService.from_config(current_app.config).recognize(
            audio_url=audio_url, audio_base64=audio_base64, headers=request.headers
        )
    except ValueError as e:
        return api_error(400, str(e))
    return api_response(result)
