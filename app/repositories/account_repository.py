"""
Account Repository implementation with ledger-specific queries.
"""
from typing import List, Optional
from sqlalchemy import desc, or_
from .base_repository import BaseRepository
from ..models import Account


class AccountRepository(BaseRepository[Account]):
    """Repository for ledger record operations."""

    def __init__(self):
        super().__init__(Account)

    def search(
        self,
        keyword: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Account]:
        """Find records by keyword and account_date range, newest first.

        keyword matches customer_name / phone / item_description (case-insensitive);
        start_date and end_date are inclusive YYYY-MM-DD bounds. Blank values are ignored.
        """
        query = self.session.query(Account)

        keyword = (keyword or "").strip()
        if keyword:
            escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{escaped}%"
            query = query.filter(
                or_(
                    Account.customer_name.ilike(pattern, escape="\\"),
                    Account.phone.ilike(pattern, escape="\\"),
                    Account.item_description.ilike(pattern, escape="\\"),
                )
            )
        # YYYY-MM-DD 字符串的字典序与日期序一致
        if start_date:
            query = query.filter(Account.account_date >= start_date)
        if end_date:
            query = query.filter(Account.account_date <= end_date)

        return query.order_by(desc(Account.created_at), desc(Account.id)).all()
