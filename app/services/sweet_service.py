# ===================================
# app/services/sweet_service.py
# ===================================

import logging
from typing import List, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.sweet import Sweet
from app.repositories.sweet_repo import SweetRepository
from app.schemas.sweet import SweetCreate, SweetUpdate

logger = logging.getLogger(__name__)

# Columns that cannot be cleared with an explicit null
REQUIRED_FIELDS = {"name", "category", "price", "quantity"}


class SweetError(Exception):
    """Base error of the sweets service"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SweetNotFoundError(SweetError):
    status_code = 404

    def __init__(self, message: str = "Sweet not found"):
        super().__init__(message)


class DuplicateSweetError(SweetError):
    status_code = 409

    def __init__(self, message: str = "Sweet with this name already exists"):
        super().__init__(message)


class InsufficientStockError(SweetError):
    status_code = 400

    def __init__(self, message: str = "Insufficient stock"):
        super().__init__(message)


class StockLimitError(SweetError):
    status_code = 400

    def __init__(self, message: str = "Stock limit exceeded"):
        super().__init__(message)


class SweetService:
    """Business logic for sweets"""

    def __init__(self, db: Session):
        self.db = db
        self.sweet_repo = SweetRepository(db)

    def list_sweets(self, skip: int = 0, limit: Optional[int] = None) -> Tuple[List[Sweet], int]:
        return self.sweet_repo.get_sweets(skip=skip, limit=limit)

    def search_sweets(self, name: Optional[str] = None, category: Optional[str] = None,
                      min_price: Optional[float] = None, max_price: Optional[float] = None,
                      skip: int = 0, limit: int = 10) -> Tuple[List[Sweet], int]:
        """Search by name/category substring and price range"""
        if min_price is not None and max_price is not None and min_price > max_price:
            raise SweetError("minPrice cannot be greater than maxPrice")

        return self.sweet_repo.get_sweets(
            skip=skip,
            limit=limit,
            name=name.strip() if name else None,
            category=category.strip() if category else None,
            min_price=min_price,
            max_price=max_price
        )

    def get_sweet(self, sweet_id: int) -> Sweet:
        sweet = self.sweet_repo.get_sweet_by_id(sweet_id)
        if not sweet:
            raise SweetNotFoundError()
        return sweet

    def create_sweet(self, sweet_data: SweetCreate) -> Sweet:
        """Create a sweet with a unique name"""
        if self.sweet_repo.get_sweet_by_name(sweet_data.name):
            raise DuplicateSweetError()

        try:
            sweet = self.sweet_repo.create_sweet(sweet_data.dict())
        except IntegrityError:
            # Lost a race against a concurrent create with the same name
            self.db.rollback()
            raise DuplicateSweetError()

        logger.info(f"Sweet created: id={sweet.id} name='{sweet.name}' qty={sweet.quantity}")
        return sweet

    def update_sweet(self, sweet_id: int, sweet_update: SweetUpdate) -> Sweet:
        """Partial update; renaming must keep names unique"""
        sweet = self.get_sweet(sweet_id)

        update_data = {
            field: value
            for field, value in sweet_update.dict(exclude_unset=True).items()
            if value is not None or field not in REQUIRED_FIELDS
        }

        if "name" in update_data and self.sweet_repo.get_sweet_by_name(update_data["name"], exclude_id=sweet_id):
            raise DuplicateSweetError()

        try:
            sweet = self.sweet_repo.update_sweet(sweet, update_data)
        except IntegrityError:
            self.db.rollback()
            raise DuplicateSweetError()

        logger.info(f"Sweet updated: id={sweet_id} fields={sorted(update_data)}")
        return sweet

    def delete_sweet(self, sweet_id: int) -> None:
        if not self.sweet_repo.delete_sweet(sweet_id):
            raise SweetNotFoundError()
        logger.info(f"Sweet deleted: id={sweet_id}")

    def purchase_sweet(self, sweet_id: int, quantity: int) -> Sweet:
        """
        Take `quantity` units of a sweet.

        The stock is only ever changed by the repository's conditional
        decrement. The existence lookup after a miss only picks the error
        returned to the caller.
        """
        sweet = self.sweet_repo.decrement_stock(sweet_id, quantity)
        if sweet is None:
            if not self.sweet_repo.exists(sweet_id):
                logger.warning(f"Purchase refused: id={sweet_id} requested={quantity} (not found)")
                raise SweetNotFoundError()
            logger.warning(f"Purchase refused: id={sweet_id} requested={quantity} (insufficient stock)")
            raise InsufficientStockError()

        logger.info(f"Purchase: id={sweet_id} qty={quantity} remaining={sweet.quantity}")
        return sweet

    def restock_sweet(self, sweet_id: int, quantity: int) -> Sweet:
        sweet = self.sweet_repo.increment_stock(sweet_id, quantity)
        if sweet is None:
            if not self.sweet_repo.exists(sweet_id):
                raise SweetNotFoundError()
            logger.warning(f"Restock refused: id={sweet_id} qty={quantity} (stock limit)")
            raise StockLimitError()

        logger.info(f"Restock: id={sweet_id} qty={quantity} stock={sweet.quantity}")
        return sweet

    def get_low_stock(self, threshold: int) -> List[Sweet]:
        return self.sweet_repo.get_low_stock(threshold)

    def get_categories(self) -> List[str]:
        return self.sweet_repo.get_categories()
