# ===================================
# app/schemas/sweet.py
# ===================================

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, validator

from app.models.sweet import MAX_PRICE, MAX_QUANTITY


class SweetBase(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    category: str = Field(min_length=2, max_length=50)
    description: Optional[str] = Field(None, max_length=500)

    @validator("name", "category", "description", pre=True)
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class SweetCreate(SweetBase):
    price: float = Field(gt=0, le=MAX_PRICE, allow_inf_nan=False)
    quantity: int = Field(ge=0, le=MAX_QUANTITY, strict=True)


class SweetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    category: Optional[str] = Field(None, min_length=2, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[float] = Field(None, ge=0, le=MAX_PRICE, allow_inf_nan=False)
    quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY, strict=True)

    @validator("name", "category", "description", pre=True)
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class StockChange(BaseModel):
    """Body of purchase and restock requests"""
    quantity: int = Field(gt=0, le=MAX_QUANTITY, strict=True, description="Must be a positive integer")


class Sweet(SweetBase):
    id: int
    price: float
    quantity: int
    is_in_stock: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SweetResponse(BaseModel):
    success: bool = True
    message: str
    data: Sweet


class SweetsListResponse(BaseModel):
    success: bool = True
    data: List[Sweet]
    total: int
    page: int
    per_page: int
    has_more: bool


class CategoriesResponse(BaseModel):
    success: bool = True
    data: List[str]
