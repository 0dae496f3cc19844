"""
Structured logging configuration for the ledger backend.
Provides logging for request timing, upstream AI/storage calls and record auditing.
"""
import json
import logging
import logging.config
import os
import sys
from datetime import datetime
from typing import Any, Dict

LOG_DIR = os.environ.get("LOG_DIR", "logs")

_EXTRA_FIELDS = (
    "record_id",
    "action",
    "resource",
    "result",
    "ip_address",
    "service",
    "operation",
    "duration_ms",
    "status_code",
)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if hasattr(record, "details"):
            log_entry["details"] = record.details

        return json.dumps(log_entry, ensure_ascii=False, default=str)


# Logging configuration
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        },
        "detailed": {
            "format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
        },
        "json": {
            "()": JSONFormatter
        }
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": sys.stdout
        },
        "file": {
            "level": "DEBUG",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "detailed",
            "filename": os.path.join(LOG_DIR, "application.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5
        },
        "error_file": {
            "level": "ERROR",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "detailed",
            "filename": os.path.join(LOG_DIR, "error.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5
        },
        "audit_file": {
            "level": "INFO",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": os.path.join(LOG_DIR, "audit.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 10
        }
    },
    "loggers": {
        "app": {
            "level": "DEBUG",
            "handlers": ["console", "file", "error_file"],
            "propagate": False
        },
        "app.audit": {
            "level": "INFO",
            "handlers": ["audit_file"],
            "propagate": False
        },
        "sqlalchemy.engine": {
            "level": "WARNING",
            "handlers": ["file"],
            "propagate": False
        },
        "apscheduler": {
            "level": "WARNING",
            "handlers": ["file"],
            "propagate": False
        },
        "werkzeug": {
            "level": "INFO",
            "handlers": ["file"],
            "propagate": False
        }
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"]
    }
}


def setup_logging():
    """Initialize logging configuration."""
    os.makedirs(LOG_DIR, exist_ok=True)

    logging.config.dictConfig(LOGGING_CONFIG)

    logger = logging.getLogger("app")
    logger.info("Logging system initialized")

    return logger


class AuditLogger:
    """Audit trail for ledger record changes and exports."""

    def __init__(self):
        self.logger = logging.getLogger("app.audit")

    def log_record_action(
        self,
        action: str,
        record_id: int = None,
        result: str = "success",
        details: Dict[str, Any] = None,
        ip_address: str = None
    ):
        """Log create/update/delete/export of ledger records."""
        extra = {
            "action": action,
            "resource": "accounts",
            "result": result,
            "details": details or {}
        }

        if record_id is not None:
            extra["record_id"] = record_id
        if ip_address:
            extra["ip_address"] = ip_address

        target = f"accounts/{record_id}" if record_id is not None else "accounts"
        self.logger.info(f"{action} on {target}: {result}", extra=extra)


class PerformanceLogger:
    """Logger for performance monitoring."""

    def __init__(self):
        self.logger = logging.getLogger("app.performance")

    def log_request_timing(
        self,
        endpoint: str,
        method: str,
        duration_ms: float,
        status_code: int
    ):
        """Log API request performance."""
        extra = {
            "endpoint": endpoint,
            "method": method,
            "duration_ms": duration_ms,
            "status_code": status_code
        }

        if duration_ms > 5000:  # > 5 seconds
            log_level = "warning"
        elif duration_ms > 2000:  # > 2 seconds
            log_level = "info"
        else:
            log_level = "debug"

        log_method = getattr(self.logger, log_level)
        log_method(
            f"{method} {endpoint} completed in {duration_ms:.2f}ms (status: {status_code})",
            extra=extra
        )

    def log_upstream_call(
        self,
        service: str,
        operation: str,
        duration_ms: float,
        status_code: int = None
    ):
        """Log third-party (ASR / LLM / object storage) call performance."""
        extra = {
            "service": service,
            "operation": operation,
            "duration_ms": duration_ms,
            "status_code": status_code
        }

        # AI 调用本身较慢，阈值放宽
        if duration_ms > 30000:
            log_level = "warning"
        elif duration_ms > 10000:
            log_level = "info"
        else:
            log_level = "debug"

        log_method = getattr(self.logger, log_level)
        log_method(
            f"{service}.{operation} took {duration_ms:.2f}ms (status: {status_code})",
            extra=extra
        )


# Global instances
audit_logger = AuditLogger()
performance_logger = PerformanceLogger()


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(f"app.{name}")


# Initialize logging when module is imported
if not logging.getLogger("app").handlers:
    setup_logging()
