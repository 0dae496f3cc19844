"""
Repository pattern implementation for data access abstraction.
Provides a uniform interface for data operations across different entities.
"""

from .base_repository import BaseRepository
from .account_repository import AccountRepository

__all__ = [
    "BaseRepository",
    "AccountRepository",
]
