"""Recurring template store interface."""

from typing import Protocol

from jogfile.core.recurrence import RecurringTemplate, TemplateFields


class TemplateStore(Protocol):
    """Interface for reading and writing recurring templates in any backend."""

    def find_all(self) -> list[RecurringTemplate]:
        """Fetch all templates, active or not."""
        ...

    def find_all_active(self) -> list[RecurringTemplate]:
        """Fetch active templates."""
        ...

    def find_by_id(self, template_id: str) -> RecurringTemplate | None:
        """Fetch a template. Returns None if not found."""
        ...

    def create(self, fields: TemplateFields) -> RecurringTemplate:
        """Create a template and return it with its assigned id."""
        ...

    def save(self, template: RecurringTemplate) -> None:
        """Persist changes to an existing template."""
        ...

    def delete(self, template_id: str) -> None:
        """Delete a template. Deleting a missing id is a no-op."""
        ...
