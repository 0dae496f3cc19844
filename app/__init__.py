"""app 工厂与初始化逻辑。
注册扩展、蓝图、统一错误响应，以及对象存储 / 内存暂存的选择。
"""
from __future__ import annotations
import os
import time
import click
from flask import Flask, g, request
from minio.error import S3Error
from werkzeug.exceptions import HTTPException
from .config import Config
from .errors import StorageUnavailable, UpstreamServiceError
from .extensions import db, migrate, swagger, scheduler, temp_assets
from .utils.helpers import api_error
from .utils.logging_utils import get_logger, performance_logger

logger = get_logger("init")


def create_app(config_object: object | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=False)

    # 基础配置
    app.config.from_object(config_object or Config())

    # 确保本地目录存在（使用绝对路径）
    data_dir = app.config.get("DATA_DIR")
    db_uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if data_dir and db_uri.startswith("sqlite:///") and not db_uri.endswith(":memory:"):
        os.makedirs(data_dir, exist_ok=True)

    # 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    swagger.init_app(app)
    temp_assets.init_app(app)

    # 对象存储可选；未配置时上传走内存暂存
    from .services.storage_service import ObjectStorageService

    storage = ObjectStorageService.from_config(app.config)
    if storage is not None:
        app.extensions["object_storage"] = storage
    else:
        logger.warning("OBJECT_STORAGE_* 未配置：图片/语音上传使用内存暂存，audio multipart 上传不可用")
    if not app.config.get("AI_API_KEY"):
        logger.warning("AI_API_KEY 未配置，语音识别(ASR)和AI解析将不可用")

    # 启动 APScheduler（BackgroundScheduler 无 init_app 方法），确保仅启动一次
    if not scheduler.running:
        scheduler.start()

    with app.app_context():
        from . import models  # noqa: F401  注册模型

        db.create_all()

    # 注册蓝图
    from .blueprints import accounts, ai, api_docs, health, upload
    app.register_blueprint(health.bp)
    app.register_blueprint(accounts.bp)
    app.register_blueprint(upload.bp)
    app.register_blueprint(ai.bp)
    app.register_blueprint(api_docs.bp)

    _register_error_handlers(app)
    _register_request_timing(app)
    _register_commands(app)

    return app


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        if not request.path.startswith("/api/"):
            return e
        return api_error(e.code or 500, e.description or e.name)

    @app.errorhandler(StorageUnavailable)
    def handle_storage_unavailable(e: StorageUnavailable):
        return api_error(e.status_code, str(e))

    @app.errorhandler(UpstreamServiceError)
    def handle_upstream_error(e: UpstreamServiceError):
        return api_error(e.status_code, str(e))

    @app.errorhandler(S3Error)
    def handle_s3_error(e: S3Error):
        logger.error(f"Object storage error: {e}")
        return api_error(502, "对象存储访问失败")


def _register_request_timing(app: Flask) -> None:
    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()

    @app.after_request
    def _log_timing(response):
        start = g.get("request_start")
        if start is not None:
            performance_logger.log_request_timing(
                request.path, request.method, (time.perf_counter() - start) * 1000, response.status_code
            )
        return response


def _register_commands(app: Flask) -> None:
    @app.cli.command("seed-accounts")
    @click.option("--count", default=20, show_default=True, help="生成账单条数")
    @click.option("--days", default=30, show_default=True, help="日期分布在最近多少天")
    @click.option("--seed", default=None, type=int, help="随机种子")
    def seed_accounts(count: int, days: int, seed: int | None):
        """写入演示账单数据。"""
        from .models import Account
        from .utils.demo_data import generate_accounts

        records = generate_accounts(count=count, days=days, seed=seed)
        db.session.add_all([Account(**r) for r in records])
        db.session.commit()
        click.echo(f"已写入 {len(records)} 条演示账单")
