"""
Health check and configuration diagnostics endpoints.
"""
from datetime import datetime
from flask import Blueprint, current_app, jsonify
from ..extensions import db
from ..utils.logging_utils import get_logger

bp = Blueprint('health', __name__, url_prefix='/api')
logger = get_logger('health')


@bp.route('/hello', methods=['GET'])
def hello():
    return jsonify({'status': 'success', 'data': 'Hello, ledger!'})


@bp.route('/health', methods=['GET'])
def health_check():
    """Simple health check endpoint."""
    try:
        db.session.execute(db.text('SELECT 1'))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return jsonify({'status': 'unhealthy', 'data': datetime.utcnow().isoformat()}), 503

    return jsonify({'status': 'success', 'data': datetime.utcnow().isoformat()})


@bp.route('/config-check', methods=['GET'])
def config_check():
    """诊断：检查 AI 与对象存储配置是否生效（不暴露密钥值）。"""
    ai_configured = bool((current_app.config.get('AI_API_KEY') or '').strip())
    storage_configured = 'object_storage' in current_app.extensions

    if ai_configured:
        message = 'AI_API_KEY 已配置，语音识别和图片识别可用'
    else:
        message = 'AI_API_KEY 未配置，请在部署环境变量中添加。变量名必须完全一致，值内勿含空格。'
    if not storage_configured:
        message += '；对象存储未配置，上传将使用内存暂存'

    return jsonify({
        'aiApiKeyConfigured': ai_configured,
        'objectStorageConfigured': storage_configured,
        'message': message,
    })
