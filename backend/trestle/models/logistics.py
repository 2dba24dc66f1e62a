"""
Logistics domain: purchase orders and the shipments that carry them.

Orders reference materials by SKU rather than by foreign key: the
materials catalog may be served by a different host with its own store.
"""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from trestle.core.database import Base, TimestampMixin


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class ShipmentStatus(str, Enum):
    PREPARING = "preparing"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    RETURNED = "returned"


class Shipment(TimestampMixin, Base):
    __tablename__ = "shipments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tracking_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    carrier: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ShipmentStatus.PREPARING.value,
    )
    shipped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_shipments_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Shipment {self.tracking_number} {self.status}>"


class Order(TimestampMixin, Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    material_sku: Mapped[str] = mapped_column(String(40), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=OrderStatus.PENDING.value,
    )
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=OrderPriority.NORMAL.value,
    )
    requested_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    shipment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("shipments.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        Index("idx_orders_status", "status"),
        Index("idx_orders_shipment", "shipment_id"),
        Index("idx_orders_material_sku", "material_sku"),
    )

    def __repr__(self) -> str:
        return f"<Order {self.order_number} {self.status}>"
