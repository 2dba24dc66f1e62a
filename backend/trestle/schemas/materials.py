"""Pydantic schemas and codecs for materials and suppliers."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from trestle.core.database import MAX_INTEGER
from trestle.models.materials import Material
from trestle.schemas.codec import DtoCodec

SKU_PATTERN = r"^[A-Z0-9][A-Z0-9-]{1,39}$"


# ─── Materials v1.0 ────────────────────────────────────────────

class MaterialCreateV1(BaseModel):
    sku: str = Field(..., pattern=SKU_PATTERN, description="Upper-case stock keeping unit")
    name: str = Field(..., min_length=1, max_length=200)
    unit: str = Field(..., min_length=1, max_length=20, description="ea, m, m2, kg, ...")
    unit_cost: float = Field(0, ge=0)
    quantity_on_hand: int = Field(0, ge=0, le=MAX_INTEGER)


class MaterialV1(BaseModel):
    id: int
    sku: str
    name: str
    unit: str
    unit_cost: float
    quantity_on_hand: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


MATERIAL_V1 = DtoCodec(create_schema=MaterialCreateV1, read_schema=MaterialV1)


# ─── Materials v2.0 ────────────────────────────────────────────

class Price(BaseModel):
    amount: float = Field(0, ge=0)
    currency: str = Field("USD", pattern=r"^[A-Z]{3}$")


class Stock(BaseModel):
    on_hand: int = Field(0, ge=0, le=MAX_INTEGER)
    reorder_level: int = Field(0, ge=0, le=MAX_INTEGER)


class MaterialCreateV2(BaseModel):
    """v2 groups pricing and stock, and links the material to a supplier."""
    sku: str = Field(..., pattern=SKU_PATTERN)
    name: str = Field(..., min_length=1, max_length=200)
    category: str | None = Field(None, max_length=100)
    unit: str = Field(..., min_length=1, max_length=20)
    price: Price = Field(default_factory=Price)
    stock: Stock = Field(default_factory=Stock)
    supplier_id: int | None = Field(None, ge=1, le=MAX_INTEGER)


class MaterialV2(BaseModel):
    id: int
    sku: str
    name: str
    category: str | None
    unit: str
    price: Price
    stock: Stock
    supplier_id: int | None
    created_at: datetime
    updated_at: datetime


def material_v2_fields(dto: MaterialCreateV2) -> dict[str, Any]:
    return {
        "sku": dto.sku,
        "name": dto.name,
        "category": dto.category,
        "unit": dto.unit,
        "unit_cost": dto.price.amount,
        "currency": dto.price.currency,
        "quantity_on_hand": dto.stock.on_hand,
        "reorder_level": dto.stock.reorder_level,
        "supplier_id": dto.supplier_id,
    }


def material_v2_dto(material: Material) -> MaterialV2:
    return MaterialV2(
        id=material.id,
        sku=material.sku,
        name=material.name,
        category=material.category,
        unit=material.unit,
        price=Price(amount=material.unit_cost, currency=material.currency),
        stock=Stock(on_hand=material.quantity_on_hand, reorder_level=material.reorder_level),
        supplier_id=material.supplier_id,
        created_at=material.created_at,
        updated_at=material.updated_at,
    )


MATERIAL_V2 = DtoCodec(
    create_schema=MaterialCreateV2,
    read_schema=MaterialV2,
    to_fields=material_v2_fields,
    to_dto=material_v2_dto,
)


# ─── Suppliers v1.0 ────────────────────────────────────────────

class SupplierCreateV1(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str | None = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    phone: str | None = Field(None, max_length=50)
    country: str | None = Field(None, pattern=r"^[A-Z]{2}$", description="ISO 3166-1 alpha-2")


class SupplierV1(BaseModel):
    id: int
    name: str
    email: str | None
    phone: str | None
    country: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


SUPPLIER_V1 = DtoCodec(create_schema=SupplierCreateV1, read_schema=SupplierV1)
