# ===================================
# app/api/v1/sweets.py
# ===================================
from typing import Any, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.security import get_current_active_user, require_scope
from app.api.deps import get_pagination_params, require_admin
from app.services.sweet_service import SweetService
from app.schemas.sweet import (
    Sweet,
    SweetCreate,
    SweetUpdate,
    StockChange,
    SweetResponse,
    SweetsListResponse,
    CategoriesResponse
)
from app.models.user import User

# Every sweets route needs an authenticated user
router = APIRouter(dependencies=[Depends(get_current_active_user)])


def _list_response(sweets, total: int, skip: int, limit: int) -> SweetsListResponse:
    return SweetsListResponse(
        data=[Sweet.from_orm(sweet) for sweet in sweets],
        total=total,
        page=(skip // limit) + 1 if limit else 1,
        per_page=limit,
        has_more=(skip + limit) < total
    )


@router.get("", response_model=SweetsListResponse)
def list_sweets(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(100, ge=1, le=100, description="Items per page"),
    current_user: User = Depends(require_scope("sweets:read")),
    db: Session = Depends(get_db)
) -> Any:
    """
    List all sweets, newest first
    """
    skip, limit = get_pagination_params(page, limit)
    sweets, total = SweetService(db).list_sweets(skip=skip, limit=limit)
    return _list_response(sweets, total, skip, limit)


@router.get("/search", response_model=SweetsListResponse)
def search_sweets(
    name: Optional[str] = Query(None, description="Name contains (case-insensitive)"),
    category: Optional[str] = Query(None, description="Category contains (case-insensitive)"),
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice", description="Minimum price"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice", description="Maximum price"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    current_user: User = Depends(require_scope("sweets:read")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Search sweets by name, category and price range
    """
    skip, limit = get_pagination_params(page, limit)
    sweets, total = SweetService(db).search_sweets(
        name=name,
        category=category,
        min_price=min_price,
        max_price=max_price,
        skip=skip,
        limit=limit
    )
    return _list_response(sweets, total, skip, limit)


@router.get("/low-stock", response_model=SweetsListResponse)
def get_low_stock_sweets(
    threshold: Optional[int] = Query(None, ge=0, description="Stock at or below this value"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Any:
    """
    Sweets running low on stock (Admin)
    """
    if threshold is None:
        threshold = settings.low_stock_threshold

    sweets = SweetService(db).get_low_stock(threshold)
    return SweetsListResponse(
        data=[Sweet.from_orm(sweet) for sweet in sweets],
        total=len(sweets),
        page=1,
        per_page=len(sweets),
        has_more=False
    )


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(
    current_user: User = Depends(require_scope("sweets:read")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Distinct categories, sorted
    """
    return CategoriesResponse(data=SweetService(db).get_categories())


@router.get("/{sweet_id}", response_model=SweetResponse)
def get_sweet(
    sweet_id: int,
    current_user: User = Depends(require_scope("sweets:read")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Fetch one sweet
    """
    sweet = SweetService(db).get_sweet(sweet_id)
    return SweetResponse(
        message="Sweet retrieved successfully",
        data=Sweet.from_orm(sweet)
    )


@router.post("", response_model=SweetResponse, status_code=status.HTTP_201_CREATED)
def create_sweet(
    sweet_data: SweetCreate,
    current_user: User = Depends(require_scope("sweets:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Create a sweet (Admin)
    """
    sweet = SweetService(db).create_sweet(sweet_data)
    return SweetResponse(
        message="Sweet created successfully",
        data=Sweet.from_orm(sweet)
    )


@router.put("/{sweet_id}", response_model=SweetResponse)
def update_sweet(
    sweet_id: int,
    sweet_update: SweetUpdate,
    current_user: User = Depends(require_scope("sweets:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Update a sweet (Admin)
    """
    sweet = SweetService(db).update_sweet(sweet_id, sweet_update)
    return SweetResponse(
        message="Sweet updated successfully",
        data=Sweet.from_orm(sweet)
    )


@router.delete("/{sweet_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_sweet(
    sweet_id: int,
    current_user: User = Depends(require_scope("sweets:write")),
    db: Session = Depends(get_db)
) -> Response:
    """
    Delete a sweet (Admin)
    """
    SweetService(db).delete_sweet(sweet_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{sweet_id}/purchase", response_model=SweetResponse)
def purchase_sweet(
    sweet_id: int,
    purchase: StockChange,
    current_user: User = Depends(require_scope("sweets:purchase")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Purchase a quantity of a sweet
    """
    sweet = SweetService(db).purchase_sweet(sweet_id, purchase.quantity)
    return SweetResponse(
        message="Purchase successful",
        data=Sweet.from_orm(sweet)
    )


@router.post("/{sweet_id}/restock", response_model=SweetResponse)
def restock_sweet(
    sweet_id: int,
    restock: StockChange,
    current_user: User = Depends(require_scope("sweets:write")),
    db: Session = Depends(get_db)
) -> Any:
    """
    Restock a sweet (Admin)
    """
    sweet = SweetService(db).restock_sweet(sweet_id, restock.quantity)
    return SweetResponse(
        message="Sweet restocked successfully",
        data=Sweet.from_orm(sweet)
    )
