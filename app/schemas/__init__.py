"""
Pydantic schemas for data validation and serialization.
Provides type-safe data models for API requests and responses.
"""
from .account_schemas import (
    AccountCreateSchema,
    AccountUpdateSchema,
    ParsedAccountSchema
)

__all__ = [
    'AccountCreateSchema',
    'AccountUpdateSchema',
    'ParsedAccountSchema'
]
