# backend/fieldops/repositories/base_repository.py
"""
Base Repository Pattern for FieldOps

Provides the foundation for all repository classes with:
- Common CRUD operations
- Type safety with generics
- Transaction support (managed by services)

Repositories never commit on their own. Services decide transaction
boundaries; see ``BaseService.run_in_session``.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException
from ..database.session_utils import get_dialect_name

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class IRepository(ABC, Generic[T]):
    """
    Abstract repository interface defining core data access methods.
    """

    @abstractmethod
    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Args:
            id: The primary key value
            load_relationships: Whether to eager load relationships

        Returns:
            The entity if found, None otherwise
        """

    @abstractmethod
    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Raises:
            RepositoryException: If creation fails
        """

    @abstractmethod
    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        """
        Update an existing entity.

        Returns:
            The updated entity if found, None otherwise
        """


class BaseRepository(IRepository[T]):
    """
    Concrete base repository implementation with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        return get_dialect_name(self.db)

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        try:
            query = self.db.query(self.model).filter(self.model.id == id)

            if load_relationships:
                query = self._apply_eager_loading(query)

            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        Integrity violations propagate unchanged so services can translate them.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError:
            self.logger.warning("Integrity error creating %s", self.model.__name__)
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")

    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        """
        Update an existing entity.

        Only updates provided fields, preserves others.
        """
        try:
            entity = self.get_by_id(id, load_relationships=False)
            if not entity:
                return None

            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)

            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to update {self.model.__name__}: {str(e)}")

    # Protected helper methods for use by subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        """
        Apply eager loading to relationships.

        Override in subclasses to specify which relationships to load.
        """
        return query
