"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from marketplace.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type, Iterable
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.

    Write methods take ``commit``: when False they only flush, leaving the
    surrounding unit of work (e.g. a cascade delete) to commit or roll back.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def _finish(self, commit: bool) -> None:
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        if filters:
            for field, value in filters.items():
                if not hasattr(self.model, field):
                    continue
                if isinstance(value, (list, tuple, set, frozenset)):
                    query = query.where(getattr(self.model, field).in_(value))
                else:
                    query = query.where(getattr(self.model, field) == value)
        return query

    async def create(self, obj_in: Dict[str, Any], commit: bool = True) -> ModelType:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record
            commit: Commit immediately, or only flush

        Returns:
            Created model instance

        Raises:
            Exception: If database operation fails
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self._finish(commit)
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: UUID of the record to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        try:
            query = (
                select(self.model)
                .where(self.model.id == id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            obj = result.scalar_one_or_none()

            if obj:
                logger.debug(f"Retrieved {self.model.__name__} with id: {id}")
            else:
                logger.debug(f"{self.model.__name__} with id {id} not found")

            return obj
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by id {id}: {e}")
            raise

    async def get_multi(
        self,
        skip: int = 0,
        limit: Optional[int] = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None
    ) -> List[ModelType]:
        """
        Get multiple records with optional filtering, pagination, and ordering.

        Args:
            skip: Number of records to skip (for pagination)
            limit: Maximum number of records to return, None for all
            filters: Dictionary of field filters
            order_by: Field name to order by (prefix with '-' for descending)

        Returns:
            List of model instances
        """
        try:
            query = self._apply_filters(select(self.model), filters)

            if order_by:
                descending = order_by.startswith('-')
                field_name = order_by.lstrip('-')
                if hasattr(self.model, field_name):
                    column = getattr(self.model, field_name)
                    query = query.order_by(column.desc() if descending else column)
            else:
                # Default ordering by created_at descending
                query = query.order_by(self.model.created_at.desc())

            query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)

            result = await self.db.execute(query)
            objects = result.scalars().all()

            logger.debug(f"Retrieved {len(objects)} {self.model.__name__} records")
            return list(objects)
        except Exception as e:
            logger.error(f"Failed to get multiple {self.model.__name__} records: {e}")
            raise

    async def update(self, id: uuid.UUID, obj_in: Dict[str, Any], commit: bool = True) -> Optional[ModelType]:
        """
        Update a record by its ID.

        None values are skipped, so callers can pass partially filled dictionaries.

        Args:
            id: UUID of the record to update
            obj_in: Dictionary of field values to update
            commit: Commit immediately, or only flush

        Returns:
            Updated model instance if found, None otherwise

        Raises:
            Exception: If database operation fails
        """
        try:
            db_obj = await self.get_by_id(id)
            if db_obj is None:
                logger.debug(f"{self.model.__name__} with id {id} not found for update")
                return None

            update_data = {k: v for k, v in obj_in.items() if v is not None}
            if not update_data:
                logger.warning(f"No valid data provided for updating {self.model.__name__} {id}")
                return db_obj

            for field, value in update_data.items():
                setattr(db_obj, field, value)

            await self._finish(commit)
            await self.db.refresh(db_obj)
            logger.debug(f"Updated {self.model.__name__} with id: {id}")
            return db_obj
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {id}: {e}")
            raise

    async def delete(self, id: uuid.UUID, commit: bool = True) -> bool:
        """
        Delete a record by its ID.

        Args:
            id: UUID of the record to delete
            commit: Commit immediately, or only flush

        Returns:
            True if record was deleted, False if not found

        Raises:
            Exception: If database operation fails
        """
        return await self.delete_many([id], commit=commit) > 0

    async def delete_many(self, ids: Iterable[uuid.UUID], commit: bool = True) -> int:
        """
        Delete multiple records by their IDs.

        Args:
            ids: UUIDs to delete
            commit: Commit immediately, or only flush

        Returns:
            Number of records deleted

        Raises:
            Exception: If database operation fails
        """
        ids = list(ids)
        if not ids:
            return 0

        try:
            stmt = (
                delete(self.model)
                .where(self.model.id.in_(ids))
                .execution_options(synchronize_session="fetch")
            )
            result = await self.db.execute(stmt)
            await self._finish(commit)

            deleted_count = result.rowcount
            logger.debug(f"Deleted {deleted_count} {self.model.__name__} records")
            return deleted_count
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} records {ids}: {e}")
            raise

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count records with optional filtering.

        Args:
            filters: Dictionary of field filters

        Returns:
            Number of matching records
        """
        try:
            query = self._apply_filters(select(func.count(self.model.id)), filters)
            result = await self.db.execute(query)
            count = result.scalar() or 0

            logger.debug(f"Counted {count} {self.model.__name__} records")
            return count
        except Exception as e:
            logger.error(f"Failed to count {self.model.__name__} records: {e}")
            raise

    async def exists(self, id: uuid.UUID) -> bool:
        """Check if a record exists by its ID."""
        try:
            query = select(func.count(self.model.id)).where(self.model.id == id)
            result = await self.db.execute(query)
            return (result.scalar() or 0) > 0
        except Exception as e:
            logger.error(f"Failed to check existence of {self.model.__name__} {id}: {e}")
            raise
