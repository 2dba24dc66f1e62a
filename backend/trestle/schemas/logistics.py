"""Pydantic schemas and codecs for orders and shipments."""

from datetime import date, datetime, timezone

from pydantic import BaseModel, Field, model_validator

from trestle.core.database import MAX_INTEGER
from trestle.models.logistics import OrderPriority, OrderStatus, ShipmentStatus
from trestle.schemas.codec import DtoCodec
from trestle.schemas.materials import SKU_PATTERN

ORDER_NUMBER_PATTERN = r"^[A-Z0-9][A-Z0-9-]{2,39}$"


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# ─── Orders v1.0 ───────────────────────────────────────────────

class OrderCreateV1(BaseModel):
    order_number: str = Field(..., pattern=ORDER_NUMBER_PATTERN)
    material_sku: str = Field(..., pattern=SKU_PATTERN)
    quantity: int = Field(..., gt=0, le=MAX_INTEGER)
    status: OrderStatus = OrderStatus.PENDING
    shipment_id: int | None = Field(None, ge=1, le=MAX_INTEGER)


class OrderV1(BaseModel):
    id: int
    order_number: str
    material_sku: str
    quantity: int
    status: OrderStatus
    shipment_id: int | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


ORDER_V1 = DtoCodec(create_schema=OrderCreateV1, read_schema=OrderV1)


# ─── Orders v2.0 ───────────────────────────────────────────────

class OrderCreateV2(OrderCreateV1):
    """v2 adds delivery priority and a requested delivery date."""
    priority: OrderPriority = OrderPriority.NORMAL
    requested_delivery_date: date | None = None


class OrderV2(OrderV1):
    priority: OrderPriority
    requested_delivery_date: date | None


ORDER_V2 = DtoCodec(create_schema=OrderCreateV2, read_schema=OrderV2)


# ─── Shipments v1.0 ────────────────────────────────────────────

class ShipmentCreateV1(BaseModel):
    tracking_number: str = Field(..., min_length=4, max_length=64)
    carrier: str = Field(..., min_length=1, max_length=100)
    status: ShipmentStatus = ShipmentStatus.PREPARING
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None

    @model_validator(mode="after")
    def check_timestamps(self):
        if (
            self.shipped_at
            and self.delivered_at
            and _as_utc(self.delivered_at) < _as_utc(self.shipped_at)
        ):
            raise ValueError("delivered_at must not be before shipped_at")
        return self


class ShipmentV1(BaseModel):
    id: int
    tracking_number: str
    carrier: str
    status: ShipmentStatus
    shipped_at: datetime | None
    delivered_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


SHIPMENT_V1 = DtoCodec(create_schema=ShipmentCreateV1, read_schema=ShipmentV1)
