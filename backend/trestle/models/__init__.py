"""All models must be imported here so SQLAlchemy registers them."""

from trestle.models.projects import Project, Milestone  # noqa: F401
from trestle.models.materials import Material, Supplier  # noqa: F401
from trestle.models.logistics import Order, Shipment  # noqa: F401
