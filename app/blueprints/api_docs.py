"""API 文档蓝图：Swagger UI（flasgger）入口与路由清单。"""
from __future__ import annotations
from flask import Blueprint, current_app, jsonify, redirect

bp = Blueprint("api_docs", __name__)


@bp.route("/api/docs")
def docs_index():
    # 重定向到 flasgger 的 UI
    return redirect("/apidocs/")


@bp.route("/api/routes")
def routes_index():
    routes = sorted(
        (
            {"rule": r.rule, "methods": sorted(m for m in r.methods if m not in ("HEAD", "OPTIONS"))}
            for r in current_app.url_map.iter_rules()
            if r.rule.startswith("/api/")
        ),
        key=lambda item: item["rule"],
    )
    return jsonify({"code": 200, "msg": "success", "data": routes})
