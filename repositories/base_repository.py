"""
Base Repository - Generic base class for all repositories
Implements common database operations following the Repository Pattern
"""

from typing import TypeVar, Generic, List, Optional, Dict, Any, Type
from sqlalchemy.orm import Session, Query
from sqlalchemy.exc import SQLAlchemyError
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

# Type variable for model classes
T = TypeVar('T')


@dataclass
class PaginationParams:
    """Parameters for pagination"""
    page: int = 1
    per_page: int = 50

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        return self.per_page


@dataclass
class PaginatedResult(Generic[T]):
    """Result of a paginated query"""
    items: List[T]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        return (self.total + self.per_page - 1) // self.per_page if self.per_page > 0 else 0

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


class BaseRepository(Generic[T]):
    """
    Base repository with common CRUD operations.

    Writes flush but do not commit; services decide the transaction
    boundary with commit(). Database errors are logged, the session is
    rolled back and the error is re-raised so callers (and the import
    retry policy) can see them.
    """

    def __init__(self, session: Session, model_class: Type[T]):
        """
        Initialize repository with database session and model class.

        Args:
            session: SQLAlchemy database session
            model_class: The model class this repository manages
        """
        self.session = session
        self.model_class = model_class

    @property
    def _name(self) -> str:
        return self.model_class.__name__

    # CREATE Operations

    def create(self, **kwargs) -> T:
        """
        Create a new entity.

        Raises:
            SQLAlchemyError: If database operation fails
        """
        try:
            entity = self.model_class(**kwargs)
            self.session.add(entity)
            self.session.flush()  # Flush to get ID without committing
            logger.debug(f"Created {self._name} with id {entity.id}")
            return entity
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self._name}: {e}")
            self.session.rollback()
            raise

    def create_many(self, entities_data: List[Dict[str, Any]]) -> List[T]:
        """
        Create multiple entities in a single flush.

        Raises:
            SQLAlchemyError: If database operation fails
        """
        try:
            entities = [self.model_class(**data) for data in entities_data]
            self.session.add_all(entities)
            self.session.flush()
            logger.debug(f"Created {len(entities)} {self._name} entities")
            return entities
        except SQLAlchemyError as e:
            logger.error(f"Error creating multiple {self._name}: {e}")
            self.session.rollback()
            raise

    # READ Operations

    def get_by_id(self, entity_id: int) -> Optional[T]:
        try:
            return self.session.get(self.model_class, entity_id)
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self._name} by id {entity_id}: {e}")
            raise

    def count(self, **filters) -> int:
        try:
            return self._build_query(filters).count()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self._name}: {e}")
            raise

    # UPDATE Operations

    def update(self, entity: T, **updates) -> T:
        """
        Update an entity with new values.

        Raises:
            SQLAlchemyError: If database operation fails
        """
        try:
            for field, value in updates.items():
                if hasattr(entity, field):
                    setattr(entity, field, value)
            self.session.flush()
            logger.debug(f"Updated {self._name} with id {entity.id}")
            return entity
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self._name}: {e}")
            self.session.rollback()
            raise

    def update_many(self, filters: Dict[str, Any], updates: Dict[str, Any]) -> int:
        """
        Update multiple entities matching filters.

        Returns:
            Number of updated entities
        """
        try:
            count = self._build_query(filters).update(updates, synchronize_session=False)
            self.session.flush()
            logger.debug(f"Updated {count} {self._name} entities")
            return count
        except SQLAlchemyError as e:
            logger.error(f"Error updating multiple {self._name}: {e}")
            self.session.rollback()
            raise

    # DELETE Operations

    def delete(self, entity: T) -> bool:
        try:
            self.session.delete(entity)
            self.session.flush()
            logger.debug(f"Deleted {self._name} with id {entity.id}")
            return True
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self._name}: {e}")
            self.session.rollback()
            raise

    def delete_many(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Delete multiple entities matching filters (all when filters is empty).

        Returns:
            Number of deleted entities
        """
        try:
            count = self._build_query(filters).delete(synchronize_session=False)
            self.session.flush()
            logger.debug(f"Deleted {count} {self._name} entities")
            return count
        except SQLAlchemyError as e:
            logger.error(f"Error deleting multiple {self._name}: {e}")
            self.session.rollback()
            raise

    # Transaction Management

    def commit(self) -> None:
        """Commit the current transaction."""
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error committing transaction: {e}")
            self.session.rollback()
            raise

    # Helper Methods

    def _build_query(self, filters: Optional[Dict[str, Any]] = None) -> Query:
        """
        Build a query with equality, IN (list values) and IS NULL (None) filters.
        Unknown field names are ignored.
        """
        query = self.session.query(self.model_class)

        if filters:
            for field, value in filters.items():
                column = getattr(self.model_class, field, None)
                if column is None:
                    continue
                if isinstance(value, (list, tuple, set)):
                    query = query.filter(column.in_(list(value)))
                elif value is None:
                    query = query.filter(column.is_(None))
                else:
                    query = query.filter(column == value)

        return query

    def _paginate(self, query: Query, pagination: PaginationParams) -> PaginatedResult[T]:
        total = query.count()
        items = query.offset(pagination.offset).limit(pagination.limit).all()
        return PaginatedResult(
            items=items,
            total=total,
            page=pagination.page,
            per_page=pagination.per_page
        )

