"""账单 API：
- GET /api/accounts 列表（keyword / startDate / endDate 筛选）
- GET /api/accounts/export 导出 CSV（同列表筛选条件）
- GET /api/accounts/<id> 详情
- POST /api/accounts 新建
- PUT /api/accounts/<id> 更新（仅更新提交的字段）
- DELETE /api/accounts/<id> 删除
"""

from __future__ import annotations

from datetime import datetime

from flask import Blueprint, request
from pydantic import ValidationError

from ..schemas.account_schemas import AccountCreateSchema, AccountUpdateSchema
from ..services.account_service import AccountService
from ..utils.helpers import api_error, api_response, csv_response
from ..utils.logging_utils import get_logger

bp = Blueprint("accounts", __name__)
logger = get_logger("accounts")


def _search_args():
    return {
        "keyword": request.args.get("keyword"),
        "start_date": request.args.get("startDate"),
        "end_date": request.args.get("endDate"),
    }


def _validation_error(e: ValidationError):
    return api_error(400, "参数校验失败", e.errors(include_url=False, include_context=False, include_input=False))


@bp.route("/api/accounts")
def list_accounts():
    args = _search_args()
    logger.info(f"GET /api/accounts - 获取账单列表 {args}")
    data = AccountService().list_accounts(**args)
    logger.info(f"返回账单列表: {len(data)} 条记录")
    return api_response(data)


@bp.route("/api/accounts/export")
def export_accounts():
    headers, rows = AccountService().export_rows(**_search_args())
    filename = f"accounts-{datetime.now().strftime('%Y%m%d')}.csv"
    return csv_response(headers, rows, filename=filename)


@bp.route("/api/accounts/<int:account_id>")
def account_detail(account_id: int):
    data = AccountService().get_account(account_id)
    if data is None:
        return api_error(404, "账单不存在")
    return api_response(data)


@bp.route("/api/accounts", methods=["POST"])
def create_account():
    payload = request.get_json(silent=True) or {}
    logger.info(f"POST /api/accounts - 创建账单 {payload}")
    try:
        data = AccountCreateSchema.model_validate(payload)
    except ValidationError as e:
        return _validation_error(e)
    return api_response(AccountService().create_account(data))


@bp.route("/api/accounts/<int:account_id>", methods=["PUT"])
def update_account(account_id: int):
    payload = request.get_json(silent=True) or {}
    logger.info(f"PUT /api/accounts/{account_id} - 更新账单 {payload}")
    try:
        data = AccountUpdateSchema.model_validate(payload)
    except ValidationError as e:
        return _validation_error(e)
    result = AccountService().update_account(account_id, data)
    if result is None:
        return api_error(404, "账单不存在")
    return api_response(result)


@bp.route("/api/accounts/<int:account_id>", methods=["DELETE"])
def delete_account(account_id: int):
    logger.info(f"DELETE /api/accounts/{account_id} - 删除账单")
    if not AccountService().delete_account(account_id):
        return api_error(404, "账单不存在")
    return api_response(None)
