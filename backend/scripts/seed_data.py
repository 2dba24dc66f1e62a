"""
Seed data script: a small bridge project with its supply chain.

Creates, through the versioned services (so every business rule runs):
  - 2 Suppliers
  - 4 Materials (v2.0, priced and linked to suppliers)
  - 2 Projects (v2.0, one active, one planned)
  - 3 Milestones on the active project
  - 1 Shipment in transit
  - 3 Orders (v2.0): one shipped, one confirmed, one pending

Usage:
  python -m scripts.seed_data

Alternatively, import and call seed_demo() with a database session.
"""

import asyncio
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from trestle.core.config import settings
from trestle.core.database import Base, build_engine, build_sessionmaker
from trestle.core.logging import configure_logging, get_logger
from trestle.services.logistics import OrderServiceV2, ShipmentServiceV1
from trestle.services.materials import MaterialServiceV2, SupplierServiceV1
from trestle.services.projects import MilestoneServiceV1, ProjectServiceV2
import trestle.models  # noqa: F401

logger = get_logger(__name__)

SUPPLIERS = [
    {"name": "Northwind Steel", "email": "sales@northwind-steel.example", "country": "US"},
    {"name": "Baltic Timber", "email": "orders@baltic-timber.example", "country": "LV"},
]

# (supplier index, payload)
MATERIALS = [
    (0, {"sku": "STL-BEAM-200", "name": "Steel beam HEB 200", "category": "structural",
         "unit": "m", "price": {"amount": 84.5}, "stock": {"on_hand": 120, "reorder_level": 40}}),
    (0, {"sku": "STL-REBAR-12", "name": "Rebar 12 mm", "category": "structural",
         "unit": "t", "price": {"amount": 910}, "stock": {"on_hand": 18, "reorder_level": 5}}),
    (1, {"sku": "TMB-GLU-90", "name": "Glulam beam 90x270", "category": "timber",
         "unit": "m", "price": {"amount": 61.2, "currency": "EUR"}, "stock": {"on_hand": 60}}),
    (None, {"sku": "CON-C30-37", "name": "Ready-mix concrete C30/37", "category": "concrete",
            "unit": "m3", "price": {"amount": 128}}),
]


async def seed_demo(db: AsyncSession) -> dict[str, int]:
    """
    Create the demo data set.
    Returns a dict of key entity names → ids for reference.
    """
    ids: dict[str, int] = {}

    # ── Materials ──────────────────────────────────────────
    suppliers = SupplierServiceV1.for_session(db)
    supplier_ids = []
    for payload in SUPPLIERS:
        supplier = await suppliers.create(payload)
        supplier_ids.append(supplier.id)
    ids["supplier_steel"], ids["supplier_timber"] = supplier_ids

    materials = MaterialServiceV2.for_session(db)
    for supplier_idx, payload in MATERIALS:
        supplier_id = supplier_ids[supplier_idx] if supplier_idx is not None else None
        material = await materials.create({**payload, "supplier_id": supplier_id})
        ids[f"material_{material.sku}"] = material.id

    # ── Projects ───────────────────────────────────────────
    projects = ProjectServiceV2.for_session(db)
    bridge = await projects.create({
        "code": "BRG-0042",
        "name": "Riverside Footbridge",
        "description": "Pedestrian bridge over the Mill River, 48 m span",
        "status": "active",
        "schedule": {"start_date": "2026-03-01", "end_date": "2027-06-30"},
        "budget": 2_450_000,
        "manager": "R. Okafor",
    })
    depot = await projects.create({
        "code": "DPT-0107",
        "name": "North Depot Extension",
        "schedule": {"start_date": "2027-01-15"},
    })
    ids["project_bridge"] = bridge.id
    ids["project_depot"] = depot.id

    milestones = MilestoneServiceV1.for_session(db)
    for name, due, done in [
        ("Foundations poured", "2026-06-15", True),
        ("Steel erection", "2026-11-30", False),
        ("Deck and handrails", "2027-04-30", False),
    ]:
        milestone = await milestones.create(
            {"project_id": bridge.id, "name": name, "due_date": due, "completed": done}
        )
        ids[f"milestone_{milestone.id}"] = milestone.id

    # ── Logistics ──────────────────────────────────────────
    shipments = ShipmentServiceV1.for_session(db)
    shipment = await shipments.create({"tracking_number": "NWS-784512", "carrier": "Nordic Freight"})
    shipment = await shipments.patch(
        shipment.id,
        {"status": "in_transit", "shipped_at": datetime(2026, 10, 12, 8, 30, tzinfo=timezone.utc).isoformat()},
    )
    ids["shipment"] = shipment.id

    orders = OrderServiceV2.for_session(db)
    shipped = await orders.create({
        "order_number": "PO-2026-0001",
        "material_sku": "STL-BEAM-200",
        "quantity": 48,
        "priority": "high",
        "requested_delivery_date": "2026-10-20",
    })
    await orders.patch(shipped.id, {"status": "confirmed"})
    await orders.patch(shipped.id, {"status": "shipped", "shipment_id": shipment.id})
    confirmed = await orders.create({
        "order_number": "PO-2026-0002",
        "material_sku": "STL-REBAR-12",
        "quantity": 6,
    })
    await orders.patch(confirmed.id, {"status": "confirmed"})
    pending = await orders.create({
        "order_number": "PO-2026-0003",
        "material_sku": "CON-C30-37",
        "quantity": 35,
        "priority": "low",
    })
    ids["order_shipped"] = shipped.id
    ids["order_confirmed"] = confirmed.id
    ids["order_pending"] = pending.id

    logger.info(
        "seed.completed",
        suppliers=len(supplier_ids),
        materials=len(MATERIALS),
        projects=2,
        milestones=3,
        shipments=1,
        orders=3,
    )
    return ids


# ─── CLI entry point ───────────────────────────────────────────

async def main():
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    engine = build_engine(settings.DATABASE_URL)
    session_factory = build_sessionmaker(engine)

    if settings.DATABASE_URL.startswith("sqlite"):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as session:
        async with session.begin():
            ids = await seed_demo(session)

    await engine.dispose()
    print(f"Seed complete: {len(ids)} key entities created.")


if __name__ == "__main__":
    asyncio.run(main())
