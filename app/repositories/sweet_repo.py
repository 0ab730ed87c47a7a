# ===================================
# app/repositories/sweet_repo.py
# ===================================
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, func, and_, desc, asc, update, delete
from datetime import datetime

from app.models.sweet import MAX_QUANTITY, Sweet


def escape_like(term: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so the term is matched literally"""
    return (
        term.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )


class SweetRepository:
    """Data access for sweets"""

    def __init__(self, db: Session):
        self.db = db

    def get_sweet_by_id(self, sweet_id: int) -> Optional[Sweet]:
        return self.db.get(Sweet, sweet_id)

    def get_sweet_by_name(self, name: str, exclude_id: Optional[int] = None) -> Optional[Sweet]:
        """Fetch a sweet by exact name, optionally ignoring one id"""
        query = select(Sweet).where(Sweet.name == name)
        if exclude_id is not None:
            query = query.where(Sweet.id != exclude_id)
        return self.db.scalar(query)

    def exists(self, sweet_id: int) -> bool:
        return self.db.scalar(select(Sweet.id).where(Sweet.id == sweet_id)) is not None

    def get_sweets(self, skip: int = 0, limit: Optional[int] = None,
                   name: Optional[str] = None,
                   category: Optional[str] = None,
                   min_price: Optional[float] = None,
                   max_price: Optional[float] = None,
                   sort_by: str = "created_at",
                   sort_order: str = "desc") -> Tuple[List[Sweet], int]:
        """Fetch sweets with filters and pagination, returns (sweets, total)"""

        query = select(Sweet)

        # Filters
        conditions = []

        if name:
            conditions.append(Sweet.name.ilike(f"%{escape_like(name)}%", escape="\\"))

        if category:
            conditions.append(Sweet.category.ilike(f"%{escape_like(category)}%", escape="\\"))

        if min_price is not None:
            conditions.append(Sweet.price >= min_price)

        if max_price is not None:
            conditions.append(Sweet.price <= max_price)

        if conditions:
            query = query.where(and_(*conditions))

        # Count the total
        count_query = select(func.count()).select_from(query.subquery())
        total = self.db.scalar(count_query)

        # Sorting, id as tie-breaker
        order_column = getattr(Sweet, sort_by, Sweet.created_at)
        if sort_order.lower() == "desc":
            query = query.order_by(desc(order_column), desc(Sweet.id))
        else:
            query = query.order_by(asc(order_column), asc(Sweet.id))

        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        sweets = self.db.scalars(query).all()

        return list(sweets), total or 0

    def get_low_stock(self, threshold: int) -> List[Sweet]:
        """Sweets at or below the threshold, lowest stock first"""
        return list(self.db.scalars(
            select(Sweet)
            .where(Sweet.quantity <= threshold)
            .order_by(asc(Sweet.quantity), asc(Sweet.name))
        ).all())

    def get_categories(self) -> List[str]:
        return list(self.db.scalars(
            select(Sweet.category).distinct().order_by(asc(Sweet.category))
        ).all())

    def create_sweet(self, sweet_data: dict) -> Sweet:
        """Insert a new sweet"""
        sweet = Sweet(**sweet_data)
        self.db.add(sweet)
        self.db.commit()
        self.db.refresh(sweet)
        return sweet

    def update_sweet(self, sweet: Sweet, update_data: dict) -> Sweet:
        for field, value in update_data.items():
            setattr(sweet, field, value)
        sweet.updated_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(sweet)
        return sweet

    def delete_sweet(self, sweet_id: int) -> bool:
        result = self.db.execute(delete(Sweet).where(Sweet.id == sweet_id))
        self.db.commit()
        return result.rowcount > 0

    def decrement_stock(self, sweet_id: int, quantity: int) -> Optional[Sweet]:
        """
        Atomically take `quantity` units from a sweet.

        A single conditional UPDATE: the row only matches while it still
        holds at least `quantity` units, so concurrent purchases can never
        oversell. Returns the updated sweet, or None when nothing matched
        (unknown id or insufficient stock).
        """
        stmt = (
            update(Sweet)
            .where(Sweet.id == sweet_id, Sweet.quantity >= quantity)
            .values(quantity=Sweet.quantity - quantity, updated_at=datetime.utcnow())
            .returning(Sweet)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        sweet = self.db.scalars(stmt).first()
        if sweet is None:
            self.db.rollback()
            return None

        # Keep the RETURNING snapshot, commit would expire it
        self.db.expunge(sweet)
        self.db.commit()
        return sweet

    def increment_stock(self, sweet_id: int, quantity: int) -> Optional[Sweet]:
        """
        Atomically add `quantity` units to a sweet.

        Returns None when nothing matched (unknown id, or the new stock
        would not fit the column).
        """
        stmt = (
            update(Sweet)
            .where(Sweet.id == sweet_id, Sweet.quantity <= MAX_QUANTITY - quantity)
            .values(quantity=Sweet.quantity + quantity, updated_at=datetime.utcnow())
            .returning(Sweet)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        sweet = self.db.scalars(stmt).first()
        if sweet is None:
            self.db.rollback()
            return None

        # Keep the RETURNING snapshot, commit would expire it
        self.db.expunge(sweet)
        self.db.commit()
        return sweet
