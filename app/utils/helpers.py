"""通用辅助函数：统一响应信封、CSV 导出、base64 解码、临时 URL 基址。"""
from __future__ import annotations
import base64
import binascii
import csv
from io import StringIO
from typing import Any, Iterable, Optional, Sequence
from flask import Response, current_app, jsonify, request
from ..errors import InvalidPayload


def api_response(data: Any = None, msg: str = "success", code: int = 200):
    return jsonify({"code": code, "msg": msg, "data": data}), code


def api_error(code: int, msg: str, data: Any = None):
    return jsonify({"code": code, "msg": msg, "data": data}), code


def csv_response(headers: Sequence[str], rows: Iterable[Sequence[Any]], filename: str = "export.csv") -> Response:
    si = StringIO()
    # BOM，Excel 打开中文不乱码
    si.write("\ufeff")
    writer = csv.writer(si)
    writer.writerow(headers)
    for r in rows:
        writer.writerow(r)
    output = si.getvalue()
    return Response(
        output,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def decode_base64_payload(value: str) -> bytes:
    """解码 base64 字符串，兼容 data URL 前缀（data:audio/wav;base64,...）。"""
    if not isinstance(value, str):
        raise InvalidPayload("base64 格式错误")
    if "," in value and value.lstrip().startswith("data:"):
        value = value.split(",", 1)[1]
    try:
        return base64.b64decode("".join(value.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidPayload("base64 格式错误") from e


def public_base_url() -> Optional[str]:
    """拼接临时资源 URL 的基址：优先 PUBLIC_URL，否则取当前请求的 host_url。"""
    configured = current_app.config.get("PUBLIC_URL")
    if configured:
        return configured.rstrip("/")
    return request.host_url.rstrip("/")
