"""
Base Repository class providing common CRUD operations.
Implements the Repository pattern for data access abstraction.
"""
from typing import TypeVar, Generic, Optional
from sqlalchemy.orm import Session
from ..extensions import db

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """Base repository providing common data operations."""

    def __init__(self, model_class: type[T], session: Optional[Session] = None):
        self.model_class = model_class
        self.session = session or db.session

    def create(self, **kwargs) -> T:
        """Create a new entity."""
        entity = self.model_class(**kwargs)
        self.session.add(entity)
        return entity

    def get_by_id(self, entity_id: int) -> Optional[T]:
        """Get entity by ID."""
        return self.session.get(self.model_class, entity_id)

    def update(self, entity: T, **kwargs) -> T:
        """Update entity with new values."""
        for key, value in kwargs.items():
            if hasattr(entity, key):
                setattr(entity, key, value)
        return entity

    def delete(self, entity: T) -> None:
        """Delete entity."""
        self.session.delete(entity)

    def delete_by_id(self, entity_id: int) -> bool:
        """Delete entity by ID. Returns True if deleted, False if not found."""
        entity = self.get_by_id(entity_id)
        if entity:
            self.delete(entity)
            return True
        return False

