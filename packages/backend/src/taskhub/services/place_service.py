"""Place service — publicly readable, owner-managed places.

Learn: Places deliberately differ from tasks: anyone, even without a
token, can list or fetch them, while create/update/delete still require
an authenticated owner.
"""

from taskhub.db.models import Place
from taskhub.services.resource_service import AccessRules, ResourceService


class PlaceService(ResourceService[Place]):
    """Business logic for place CRUD."""

    model = Place
    resource_name = "Place"
    rules = AccessRules(
        ownership_required_for_read=False,
        caller_must_exist_for_read=False,
        caller_must_exist_for_write=True,
    )
    required_fields = ("name",)
    updatable_fields = frozenset({"name", "description", "address"})
