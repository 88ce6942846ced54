"""Statistics DTOs (read-only rollups)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TopProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str
    quantity_sold: int
    revenue: Decimal


class TopBoutiqueDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    boutique_id: UUID
    boutique_name: str
    revenue: Decimal


class OrderRollupDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_count: int
    orders_by_status: Dict[str, int]
    payments_by_status: Dict[str, int]
    revenue: Decimal


class ProductRollupDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    active: int
    low_stock: int


class VendorStatisticsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    boutique_id: UUID
    boutique_name: str
    orders: OrderRollupDTO
    products: ProductRollupDTO
    top_products: List[TopProductDTO]
    generated_at: datetime


class GlobalStatisticsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    orders: OrderRollupDTO
    boutique_count: int
    active_boutique_count: int
    top_boutique: Optional[TopBoutiqueDTO]
    generated_at: datetime
