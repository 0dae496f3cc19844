"""
Pydantic schemas for ledger record operations.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class AccountCreateSchema(BaseModel):
    """Schema for creating a ledger record."""

    customer_name: str = Field(..., min_length=1, max_length=100, description="Customer name")
    phone: Optional[str] = Field(None, max_length=20, description="Contact phone")
    amount: float = Field(..., description="Transaction amount")
    is_paid: bool = Field(False, description="Paid status")
    item_description: str = Field(..., min_length=1, description="Purchased items")
    account_date: str = Field(..., pattern=DATE_PATTERN, description="Transaction date, YYYY-MM-DD")
    image_url: Optional[str] = Field(None, description="Receipt image URL")

    @field_validator("customer_name", "item_description")
    @classmethod
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("phone", "image_url")
    @classmethod
    def empty_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class AccountUpdateSchema(BaseModel):
    """Schema for partially updating a ledger record."""

    customer_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    amount: Optional[float] = None
    is_paid: Optional[bool] = None
    item_description: Optional[str] = Field(None, min_length=1)
    account_date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    image_url: Optional[str] = None

    @field_validator("customer_name", "amount", "is_paid", "item_description", "account_date", mode="before")
    @classmethod
    def reject_explicit_null(cls, v):
        # 未提交的字段不经过校验；显式 null 对应 NOT NULL 列
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("customer_name", "item_description")
    @classmethod
    def validate_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v.strip() if v else v


class ParsedAccountSchema(BaseModel):
    """Fields extracted by the language model; every field is optional."""

    customer_name: Optional[str] = None
    phone: Optional[str] = None
    amount: Optional[float] = None
    item_description: Optional[str] = None
    is_paid: Optional[bool] = None
    account_date: Optional[str] = None

    @field_validator("customer_name", "phone", "item_description", "account_date", mode="before")
    @classmethod
    def coerce_to_str(cls, v):
        # 模型偶尔把手机号等输出成数字
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("is_paid", mode="before")
    @classmethod
    def normalize_is_paid(cls, v):
        if v is None or isinstance(v, bool):
            return v
        return v in ("true", "已付款")

    @field_validator("amount", mode="before")
    @classmethod
    def drop_unparseable_amount(cls, v):
        if isinstance(v, str):
            try:
                return float(v.replace(",", "").replace("元", "").strip())
            except ValueError:
                return None
        return v
