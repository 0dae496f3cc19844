"""
账单服务层：CRUD、筛选与导出行构造。
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..models import Account
from ..repositories.account_repository import AccountRepository
from ..schemas.account_schemas import AccountCreateSchema, AccountUpdateSchema
from ..utils.logging_utils import audit_logger, get_logger
from .base_service import BaseService

logger = get_logger("accounts")

EXPORT_HEADERS = ["日期", "客户姓名", "联系电话", "金额", "商品描述", "付款状态", "图片"]


class AccountService(BaseService):
    """账单业务操作"""

    def __init__(self, repository: Optional[AccountRepository] = None):
        self.repo = repository or AccountRepository()
        super().__init__(self.repo.session)

    def list_accounts(
        self,
        keyword: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return [a.to_dict() for a in self.repo.search(keyword, start_date, end_date)]

    def get_account(self, account_id: int) -> Optional[Dict[str, Any]]:
        account = self.repo.get_by_id(account_id)
        return account.to_dict() if account else None

    def create_account(self, data: AccountCreateSchema) -> Dict[str, Any]:
        account = self.repo.create(**data.model_dump())
        try:
            self.commit()
        except Exception:
            self.rollback()
            logger.exception("创建账单失败")
            raise
        audit_logger.log_record_action("create", account.id, details={"amount": data.amount})
        logger.info(f"创建账单成功: {account.id}")
        return account.to_dict()

    def update_account(self, account_id: int, data: AccountUpdateSchema) -> Optional[Dict[str, Any]]:
        account = self.repo.get_by_id(account_id)
        if account is None:
            return None
        changes = data.model_dump(exclude_unset=True)
        self.repo.update(account, **changes)
        try:
            self.commit()
        except Exception:
            self.rollback()
            logger.exception(f"更新账单失败: {account_id}")
            raise
        audit_logger.log_record_action("update", account_id, details={"fields": sorted(changes)})
        return account.to_dict()

    def delete_account(self, account_id: int) -> bool:
        if not self.repo.delete_by_id(account_id):
            return False
        self.commit()
        audit_logger.log_record_action("delete", account_id)
        return True

    def export_rows(
        self,
        keyword: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Tuple[Sequence[str], List[List[Any]]]:
        """导出用表头与数据行，末尾追加合计行。"""
        items: List[Account] = self.repo.search(keyword, start_date, end_date)
        rows: List[List[Any]] = []
        paid_total = 0.0
        unpaid_total = 0.0
        for a in items:
            amount = float(a.amount or 0)
            if a.is_paid:
                paid_total += amount
            else:
                unpaid_total += amount
            rows.append(
                [
                    a.account_date,
                    a.customer_name,
                    a.phone or "",
                    f"{amount:.2f}",
                    a.item_description,
                    "已付款" if a.is_paid else "未付款",
                    a.image_url or "",
                ]
            )
        rows.append(
            [
                "合计",
                f"{len(items)} 条",
                "",
                f"{paid_total + unpaid_total:.2f}",
                "",
                f"已付 {paid_total:.2f} / 未付 {unpaid_total:.2f}",
                "",
            ]
        )
        audit_logger.log_record_action("export", details={"count": len(items)})
        return EXPORT_HEADERS, rows
