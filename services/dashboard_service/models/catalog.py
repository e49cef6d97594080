"""Product documents."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from services.dashboard_service.models.base import DocumentModel

PRODUCTS = "products"


class Product(DocumentModel):
    name: str
    description: Optional[str] = None
    price: float = 0
    compare_at_price: Optional[float] = None
    sku: Optional[str] = None
    inventory: Optional[int] = None
    images: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    published: bool = False
    store_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
