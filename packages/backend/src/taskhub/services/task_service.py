"""Task service — private to-do items.

Learn: Tasks are the strictest resource. Every operation first confirms
the caller's User row still exists (a deleted user's token gets 404
"User not found"), listing is scoped in the query itself, and reading a
single task requires ownership just like changing it.
"""

from typing import Any, Mapping

from taskhub.db.models import Task, TaskStatus
from taskhub.errors import ValidationError
from taskhub.services.resource_service import AccessRules, ResourceService


class TaskService(ResourceService[Task]):
    """Business logic for task CRUD."""

    model = Task
    resource_name = "Task"
    rules = AccessRules(
        ownership_required_for_read=True,
        caller_must_exist_for_read=True,
        caller_must_exist_for_write=True,
    )
    required_fields = ("title",)
    updatable_fields = frozenset({"title", "description", "status"})

    def _validate_required(self, data: Mapping[str, Any], *, partial: bool) -> None:
        super()._validate_required(data, partial=partial)

        status = data.get("status")
        if status is None:
            # Omitted on create → PENDING; explicitly nulled in a patch → invalid.
            if partial and "status" in data:
                raise ValidationError("status is required")
            return
        try:
            TaskStatus(status)
        except ValueError:
            raise ValidationError(
                "status must be one of: " + ", ".join(s.value for s in TaskStatus)
            )
