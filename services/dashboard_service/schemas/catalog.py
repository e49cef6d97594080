from typing import Optional

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: float = Field(default=0, ge=0)
    compare_at_price: Optional[float] = Field(default=None, ge=0)
    sku: Optional[str] = None
    inventory: Optional[int] = Field(default=None, ge=0)
    images: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    published: bool = False
    slug: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    compare_at_price: Optional[float] = Field(default=None, ge=0)
    sku: Optional[str] = None
    inventory: Optional[int] = Field(default=None, ge=0)
    images: Optional[list[str]] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    published: Optional[bool] = None
    slug: Optional[str] = None
