import math
import uuid
from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from sqlalchemy.sql import Select
from taskforge.database import Base

ModelType = TypeVar("ModelType", bound=Base)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class CRUDBase(Generic[ModelType]):
    """
    Generic CRUD class for tenant-owned models.

    Reads return rows regardless of tenant: deciding whether the caller may
    see a row is the authorization policy's job, and the service needs the
    row's tenant to ask. Listing helpers always take an explicit tenant_id.

    Writes accept ``commit``; pass ``commit=False`` to keep several writes in
    one transaction and commit them together.

    Type Parameters:
        ModelType: SQLAlchemy model class
    """

    def __init__(self, model: Type[ModelType]):
        """
        Initialize CRUD object with model class.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def get(self, db: Session, id: uuid.UUID) -> Optional[ModelType]:
        """
        Retrieve a single record by ID.

        Args:
            db: Database session
            id: Record ID

        Returns:
            Model instance or None if not found
        """
        stmt = select(self.model).where(self.model.id == id)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def count(self, db: Session, *, tenant_id: uuid.UUID) -> int:
        """Count the tenant's records."""
        stmt = select(func.count()).select_from(self.model).where(
            self.model.tenant_id == tenant_id
        )
        return db.execute(stmt).scalar_one()

    def paginate(
        self,
        db: Session,
        stmt: Select,
        *,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Any], int]:
        """
        Run ``stmt`` for one 1-indexed page.

        Args:
            db: Database session
            stmt: Filtered and ordered select statement
            page: Page number, starting at 1
            limit: Page size

        Returns:
            Tuple of (rows on the page, total matching rows)
        """
        count_stmt = select(func.count()).select_from(
            stmt.order_by(None).subquery()
        )
        total = db.execute(count_stmt).scalar_one()
        rows = db.execute(stmt.offset((page - 1) * limit).limit(limit))
        return list(rows.scalars().all()), total

    def create(
        self,
        db: Session,
        *,
        obj_in: Dict[str, Any],
        commit: bool = True
    ) -> ModelType:
        """
        Create a new record.

        Args:
            db: Database session
            obj_in: Column values
            commit: Whether to commit immediately

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()  # Get ID without committing
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Dict[str, Any],
        commit: bool = True
    ) -> ModelType:
        """
        Update an existing record.

        Note: This method assumes the caller already authorized the write
        against db_obj's tenant.

        Args:
            db: Database session
            db_obj: Existing model instance to update
            obj_in: Column values to change
            commit: Whether to commit immediately

        Returns:
            Updated model instance
        """
        for field, value in obj_in.items():
            setattr(db_obj, field, value)

        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def delete(self, db: Session, *, db_obj: ModelType, commit: bool = True) -> ModelType:
        """
        Delete a record.

        Args:
            db: Database session
            db_obj: Instance to delete
            commit: Whether to commit immediately

        Returns:
            The deleted instance
        """
        db.delete(db_obj)
        if commit:
            db.commit()
        else:
            db.flush()
        return db_obj
