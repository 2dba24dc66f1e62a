"""Materials domain services: catalog entries and suppliers."""

from typing import Any

from trestle.core.errors import BusinessRuleError
from trestle.models.materials import Material, Supplier
from trestle.schemas.materials import MATERIAL_V1, MATERIAL_V2, SUPPLIER_V1
from trestle.services.base import CrudService, parse_id
from trestle.services.normalization import normalize_code


class MaterialServiceV1(CrudService[Material]):
    resource = "materials"
    version = "1.0"
    model = Material
    codec = MATERIAL_V1
    filters = {"sku": normalize_code, "unit": str}
    search_field = "name"

    async def before_create(self, fields: dict[str, Any]) -> None:
        await self.ensure_unique("sku", fields["sku"])

    async def before_update(self, entity: Material, fields: dict[str, Any]) -> None:
        await self.ensure_unique("sku", fields["sku"], exclude_id=entity.id)


class MaterialServiceV2(CrudService[Material]):
    resource = "materials"
    version = "2.0"
    model = Material
    codec = MATERIAL_V2
    filters = {"sku": normalize_code, "unit": str, "category": str, "supplier_id": parse_id}
    search_field = "name"

    async def before_create(self, fields: dict[str, Any]) -> None:
        await self.ensure_reference("supplier_id", Supplier, fields["supplier_id"])
        await self.ensure_unique("sku", fields["sku"])

    async def before_update(self, entity: Material, fields: dict[str, Any]) -> None:
        await self.ensure_reference("supplier_id", Supplier, fields["supplier_id"])
        await self.ensure_unique("sku", fields["sku"], exclude_id=entity.id)


class SupplierServiceV1(CrudService[Supplier]):
    resource = "suppliers"
    version = "1.0"
    model = Supplier
    codec = SUPPLIER_V1
    filters = {"country": str.upper}
    search_field = "name"

    async def before_delete(self, entity: Supplier) -> None:
        if await self.repository_for(Material).exists(supplier_id=entity.id):
            raise BusinessRuleError(
                f"Supplier {entity.id} still supplies materials and cannot be deleted",
                rule="supplier_in_use",
            )
