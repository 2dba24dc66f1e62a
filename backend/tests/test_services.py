"""Tests for the generic CRUD service and its helpers."""

import pytest

from trestle.core.errors import BusinessRuleError, NotFoundError, ValidationError
from trestle.services.base import ensure_transition, merge_payload, parse_bool
from trestle.services.logistics import OrderServiceV1, OrderServiceV2, ShipmentServiceV1
from trestle.services.materials import MaterialServiceV1, MaterialServiceV2, SupplierServiceV1
from trestle.services.projects import MilestoneServiceV1, ProjectServiceV1, ProjectServiceV2

DTO_METADATA = {"id", "created_at", "updated_at"}


def projection(dto) -> dict:
    return {k: v for k, v in dto.model_dump(mode="json").items() if k not in DTO_METADATA}


# ─── Round trip: get(create(x).id) == x under each version's projection ──

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "service_cls, payload",
    [
        (ProjectServiceV1, {
            "name": "Riverside Footbridge", "description": "48 m span", "status": "planned",
            "start_date": "2026-03-01", "end_date": "2027-06-30",
        }),
        (ProjectServiceV2, {
            "code": "BRG-0042", "name": "Riverside Footbridge", "description": None,
            "status": "active", "schedule": {"start_date": "2026-03-01", "end_date": None},
            "budget": 2450000.0, "manager": "R. Okafor",
        }),
        (MaterialServiceV1, {
            "sku": "STL-BEAM-200", "name": "Steel beam", "unit": "m",
            "unit_cost": 84.5, "quantity_on_hand": 120,
        }),
        (MaterialServiceV2, {
            "sku": "STL-BEAM-200", "name": "Steel beam", "category": "structural", "unit": "m",
            "price": {"amount": 84.5, "currency": "EUR"},
            "stock": {"on_hand": 120, "reorder_level": 40}, "supplier_id": None,
        }),
        (SupplierServiceV1, {
            "name": "Northwind Steel", "email": "sales@northwind.example",
            "phone": "+1 555 0100", "country": "US",
        }),
        (OrderServiceV1, {
            "order_number": "PO-2026-0001", "material_sku": "STL-BEAM-200", "quantity": 48,
            "status": "pending", "shipment_id": None,
        }),
        (OrderServiceV2, {
            "order_number": "PO-2026-0001", "material_sku": "STL-BEAM-200", "quantity": 48,
            "status": "pending", "shipment_id": None, "priority": "high",
            "requested_delivery_date": "2026-10-20",
        }),
        (ShipmentServiceV1, {
            "tracking_number": "NWS-784512", "carrier": "Nordic Freight", "status": "preparing",
            "shipped_at": None, "delivered_at": None,
        }),
    ],
    ids=lambda value: getattr(value, "__name__", None),
)
async def test_round_trip(db_session, service_cls, payload):
    service = service_cls.for_session(db_session)

    created = await service.create(payload)
    fetched = await service.get(created.id)

    assert projection(fetched) == payload
    assert fetched == created


@pytest.mark.asyncio
async def test_milestone_round_trip(db_session):
    project = await ProjectServiceV1.for_session(db_session).create({"name": "Bridge"})
    service = MilestoneServiceV1.for_session(db_session)
    payload = {"project_id": project.id, "name": "Foundations", "due_date": "2026-06-15",
               "completed": False}

    created = await service.create(payload)

    assert projection(await service.get(created.id)) == payload


# ─── Version projections ──────────────────────────────────────

@pytest.mark.asyncio
async def test_write_through_old_version_keeps_newer_fields(db_session):
    v2 = ProjectServiceV2.for_session(db_session)
    v1 = ProjectServiceV1.for_session(db_session)
    created = await v2.create({"code": "BRG-0042", "name": "Bridge", "budget": 1000})

    await v1.replace(created.id, {"name": "Bridge (renamed)"})

    after = await v2.get(created.id)
    assert after.name == "Bridge (renamed)"
    assert after.code == "BRG-0042"
    assert after.budget == 1000


@pytest.mark.asyncio
async def test_versions_read_the_same_entity_differently(db_session):
    created = await MaterialServiceV1.for_session(db_session).create(
        {"sku": "STL-BEAM-200", "name": "Beam", "unit": "m", "unit_cost": 10, "quantity_on_hand": 3}
    )

    v2 = await MaterialServiceV2.for_session(db_session).get(created.id)
    assert v2.price.amount == 10
    assert v2.price.currency == "USD"
    assert v2.stock.on_hand == 3


# ─── Operations ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_invalid_payload(db_session):
    service = ProjectServiceV1.for_session(db_session)

    with pytest.raises(ValidationError) as exc_info:
        await service.create({"description": "no name"})
    assert "name" in exc_info.value.errors


@pytest.mark.asyncio
async def test_create_rejects_non_object_body(db_session):
    with pytest.raises(ValidationError) as exc_info:
        await ProjectServiceV1.for_session(db_session).create(["name"])
    assert exc_info.value.errors == {"body": ["Request body must be a JSON object"]}


@pytest.mark.asyncio
async def test_replace_is_a_full_update(db_session):
    service = ProjectServiceV1.for_session(db_session)
    created = await service.create({"name": "Bridge", "description": "old"})

    replaced = await service.replace(created.id, {"name": "Bridge"})
    assert replaced.description is None


@pytest.mark.asyncio
async def test_patch_merges_nested_objects(db_session):
    service = ProjectServiceV2.for_session(db_session)
    created = await service.create({
        "code": "BRG-0042", "name": "Bridge",
        "schedule": {"start_date": "2026-03-01", "end_date": "2027-06-30"},
    })

    patched = await service.patch(created.id, {"schedule": {"end_date": "2027-09-30"}})
    assert str(patched.schedule.start_date) == "2026-03-01"
    assert str(patched.schedule.end_date) == "2027-09-30"
    assert patched.code == "BRG-0042"


@pytest.mark.asyncio
async def test_patch_still_validates_the_result(db_session):
    service = ProjectServiceV1.for_session(db_session)
    created = await service.create({"name": "Bridge", "start_date": "2026-03-01"})

    with pytest.raises(ValidationError):
        await service.patch(created.id, {"end_date": "2026-01-01"})


@pytest.mark.asyncio
async def test_delete_missing(db_session):
    with pytest.raises(NotFoundError):
        await ProjectServiceV1.for_session(db_session).delete(999999)


@pytest.mark.asyncio
async def test_list_page(db_session):
    service = ProjectServiceV1.for_session(db_session)
    for name in ("Alpha", "Beta", "Gamma"):
        await service.create({"name": name})

    page = await service.list({}, limit=2, offset=0)
    assert page.total == 3
    assert [p.name for p in page.items] == ["Alpha", "Beta"]
    assert page.to_dict()["limit"] == 2


@pytest.mark.asyncio
async def test_list_rejects_unknown_filter(db_session):
    with pytest.raises(ValidationError) as exc_info:
        await ProjectServiceV1.for_session(db_session).list({"colour": "red"})
    assert "colour" in exc_info.value.errors


@pytest.mark.asyncio
async def test_list_rejects_uncoercible_filter(db_session):
    with pytest.raises(ValidationError) as exc_info:
        await MilestoneServiceV1.for_session(db_session).list({"project_id": "abc"})
    assert exc_info.value.errors == {"project_id": ["Invalid value: 'abc'"]}


@pytest.mark.asyncio
async def test_list_normalizes_code_filters(db_session):
    service = MaterialServiceV1.for_session(db_session)
    await service.create({"sku": "STL-BEAM-200", "name": "Beam", "unit": "m"})

    page = await service.list({"sku": " stl beam_200 "})
    assert page.total == 1


# ─── Helpers ──────────────────────────────────────────────────

class TestHelpers:
    @pytest.mark.parametrize("raw, expected", [
        ("true", True), ("1", True), ("YES", True),
        ("false", False), ("0", False), ("no", False),
    ])
    def test_parse_bool(self, raw, expected):
        assert parse_bool(raw) is expected

    def test_parse_bool_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")

    def test_ensure_transition(self):
        transitions = {"a": {"b"}, "b": set()}
        ensure_transition("Thing", transitions, "a", "b")
        ensure_transition("Thing", transitions, "b", "b")
        with pytest.raises(BusinessRuleError, match="cannot move from 'b' to 'a'"):
            ensure_transition("Thing", transitions, "b", "a")

    def test_merge_payload(self):
        current = {"name": "x", "price": {"amount": 1, "currency": "USD"}, "tags": [1]}
        merged = merge_payload(current, {"price": {"amount": 2}, "tags": [2]})
        assert merged == {"name": "x", "price": {"amount": 2, "currency": "USD"}, "tags": [2]}
        assert current["price"]["amount"] == 1
