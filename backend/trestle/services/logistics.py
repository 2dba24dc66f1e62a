"""
Logistics domain services.

Order status machine:

    pending   -> confirmed | cancelled
    confirmed -> shipped | cancelled
    shipped   -> delivered

Shipment status machine:

    preparing  -> in_transit
    in_transit -> delivered | returned
"""

from typing import Any

from trestle.core.errors import BusinessRuleError
from trestle.models.logistics import Order, OrderPriority, OrderStatus, Shipment, ShipmentStatus
from trestle.schemas.logistics import ORDER_V1, ORDER_V2, SHIPMENT_V1
from trestle.services.base import CrudService, enum_filter, ensure_transition, parse_id
from trestle.services.normalization import normalize_code

ORDER_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING.value: {OrderStatus.CONFIRMED.value, OrderStatus.CANCELLED.value},
    OrderStatus.CONFIRMED.value: {OrderStatus.SHIPPED.value, OrderStatus.CANCELLED.value},
    OrderStatus.SHIPPED.value: {OrderStatus.DELIVERED.value},
    OrderStatus.DELIVERED.value: set(),
    OrderStatus.CANCELLED.value: set(),
}

DELETABLE_ORDER_STATUSES = {OrderStatus.PENDING.value, OrderStatus.CANCELLED.value}

SHIPMENT_TRANSITIONS: dict[str, set[str]] = {
    ShipmentStatus.PREPARING.value: {ShipmentStatus.IN_TRANSIT.value},
    ShipmentStatus.IN_TRANSIT.value: {ShipmentStatus.DELIVERED.value, ShipmentStatus.RETURNED.value},
    ShipmentStatus.DELIVERED.value: set(),
    ShipmentStatus.RETURNED.value: set(),
}


class _OrderRules:
    """Order rules shared by every order version."""

    @staticmethod
    async def on_create(service: CrudService, fields: dict[str, Any]) -> None:
        if fields["status"] != OrderStatus.PENDING.value:
            raise BusinessRuleError(
                f"New orders must be 'pending', not '{fields['status']}'",
                rule="initial_status",
            )
        await service.ensure_reference("shipment_id", Shipment, fields["shipment_id"])
        await service.ensure_unique("order_number", fields["order_number"])

    @staticmethod
    async def on_update(service: CrudService, entity: Order, fields: dict[str, Any]) -> None:
        ensure_transition("Order", ORDER_TRANSITIONS, entity.status, fields["status"])
        await service.ensure_reference("shipment_id", Shipment, fields["shipment_id"])
        await service.ensure_unique("order_number", fields["order_number"], exclude_id=entity.id)
        if fields["status"] == OrderStatus.SHIPPED.value and fields["shipment_id"] is None:
            raise BusinessRuleError(
                "An order cannot be shipped without a shipment",
                rule="shipped_requires_shipment",
            )

    @staticmethod
    def on_delete(entity: Order) -> None:
        if entity.status not in DELETABLE_ORDER_STATUSES:
            raise BusinessRuleError(
                f"Order {entity.order_number} is '{entity.status}'; "
                "only pending or cancelled orders can be deleted",
                rule="order_in_progress",
            )


class OrderServiceV1(CrudService[Order]):
    resource = "orders"
    version = "1.0"
    model = Order
    codec = ORDER_V1
    filters = {
        "status": enum_filter(OrderStatus),
        "material_sku": normalize_code,
        "shipment_id": parse_id,
    }
    search_field = "order_number"

    async def before_create(self, fields: dict[str, Any]) -> None:
        await _OrderRules.on_create(self, fields)

    async def before_update(self, entity: Order, fields: dict[str, Any]) -> None:
        await _OrderRules.on_update(self, entity, fields)

    async def before_delete(self, entity: Order) -> None:
        _OrderRules.on_delete(entity)


class OrderServiceV2(CrudService[Order]):
    resource = "orders"
    version = "2.0"
    model = Order
    codec = ORDER_V2
    filters = {
        "status": enum_filter(OrderStatus),
        "material_sku": normalize_code,
        "shipment_id": parse_id,
        "priority": enum_filter(OrderPriority),
    }
    search_field = "order_number"

    async def before_create(self, fields: dict[str, Any]) -> None:
        await _OrderRules.on_create(self, fields)
        self._check_priority(fields)

    async def before_update(self, entity: Order, fields: dict[str, Any]) -> None:
        await _OrderRules.on_update(self, entity, fields)
        self._check_priority(fields)

    async def before_delete(self, entity: Order) -> None:
        _OrderRules.on_delete(entity)

    @staticmethod
    def _check_priority(fields: dict[str, Any]) -> None:
        if (
            fields["priority"] == OrderPriority.HIGH.value
            and fields["requested_delivery_date"] is None
        ):
            raise BusinessRuleError(
                "High priority orders need a requested_delivery_date",
                rule="high_priority_requires_date",
            )


class ShipmentServiceV1(CrudService[Shipment]):
    resource = "shipments"
    version = "1.0"
    model = Shipment
    codec = SHIPMENT_V1
    filters = {"status": enum_filter(ShipmentStatus), "carrier": str}
    search_field = "tracking_number"

    async def before_create(self, fields: dict[str, Any]) -> None:
        if fields["status"] != ShipmentStatus.PREPARING.value:
            raise BusinessRuleError(
                f"New shipments must be 'preparing', not '{fields['status']}'",
                rule="initial_status",
            )
        await self.ensure_unique("tracking_number", fields["tracking_number"])

    async def before_update(self, entity: Shipment, fields: dict[str, Any]) -> None:
        ensure_transition("Shipment", SHIPMENT_TRANSITIONS, entity.status, fields["status"])
        await self.ensure_unique("tracking_number", fields["tracking_number"], exclude_id=entity.id)
        if fields["status"] == ShipmentStatus.IN_TRANSIT.value and fields["shipped_at"] is None:
            raise BusinessRuleError(
                "A shipment in transit needs shipped_at",
                rule="in_transit_requires_shipped_at",
            )
        if fields["status"] == ShipmentStatus.DELIVERED.value and fields["delivered_at"] is None:
            raise BusinessRuleError(
                "A delivered shipment needs delivered_at",
                rule="delivered_requires_delivered_at",
            )

    async def before_delete(self, entity: Shipment) -> None:
        if await self.repository_for(Order).exists(shipment_id=entity.id):
            raise BusinessRuleError(
                f"Shipment {entity.tracking_number} has orders attached and cannot be deleted",
                rule="shipment_in_use",
            )
