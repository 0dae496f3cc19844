"""SQLAlchemy 模型定义（SQLite / PostgreSQL 兼容）。
包含：accounts（账单）

账单为单表，无关联；金额以 Numeric(10, 2) 存储，日期以 YYYY-MM-DD 字符串存储。
"""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict, Any
from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from .extensions import db


# 辅助 mixin
class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Account(db.Model, TimestampMixin):
    __tablename__ = "accounts"
    id: Mapped[int] = mapped_column(primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_paid: Mapped[bool] = mapped_column(nullable=False, default=False)
    item_description: Mapped[str] = mapped_column(Text, nullable=False)
    account_date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "amount": float(self.amount or 0),
            "is_paid": bool(self.is_paid),
            "item_description": self.item_description,
            "account_date": self.account_date,
            "image_url": self.image_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
