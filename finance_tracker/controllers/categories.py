"""
Categories View Controller

Lists the user's categories and creates, renames and deletes them.
The server refuses to delete a category that still has budgets; its
explanation is shown to the user as-is.
"""

from typing import Optional

from pydantic import ValidationError

from finance_tracker.audit import ActivityLogger
from finance_tracker.controllers.base import ViewController
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.finance import Category, CategoryPayload, CategoryType
from finance_tracker.services.api import ApiClient, ApiError


class CategoryViewController(ViewController):
    """Controller for the categories screen."""

    entity_type = "category"

    def __init__(self, client: ApiClient, activity: Optional[ActivityLogger] = None):
        super().__init__(client, activity)
        self.categories: list[Category] = []
        self.pending = False
        self.fetching = False

    def of_type(self, category_type: CategoryType) -> list[Category]:
        return [c for c in self.categories if c.type == category_type]

    def _payload(self, name: str, category_type) -> Optional[CategoryPayload]:
        try:
            return CategoryPayload(name=name, type=category_type)
        except ValidationError:
            self._reject_input("name", "Enter a name (up to 100 characters) and pick income or expense.")
            return None

    async def load(self) -> None:
        self.fetching = True
        self.error_message = None
        try:
            self.categories = await self._client.list_categories()
        except ApiError as e:
            self.categories = []
            self.error_message = e.message
            self._activity.log(
                AuditEventBuilder.load_failed("categories", None, e.message, e.status_code)
            )
            return
        finally:
            self.fetching = False
            self.loaded = True
        self._activity.log(AuditEventBuilder.data_loaded("categories", None, len(self.categories)))

    async def create(self, name: str, category_type) -> Optional[Category]:
        payload = self._payload(name, category_type)
        if payload is None:
            return None

        self.pending = True
        self.error_message = None
        try:
            category = await self._client.create_category(payload)
        except ApiError as e:
            self._mutation_failed("create", e)
            return None
        finally:
            self.pending = False

        self.categories = [*self.categories, category]
        self._activity.log(
            AuditEventBuilder.entity_created("category", category.id, {"type": category.type.value})
        )
        return category

    async def update(self, category_id: int, name: str, category_type) -> Optional[Category]:
        payload = self._payload(name, category_type)
        if payload is None:
            return None

        self.pending = True
        self.error_message = None
        try:
            updated = await self._client.update_category(category_id, payload)
        except ApiError as e:
            self._mutation_failed("update", e, category_id)
            return None
        finally:
            self.pending = False

        self.categories = [updated if c.id == category_id else c for c in self.categories]
        self._activity.log(AuditEventBuilder.entity_updated("category", category_id))
        return updated

    async def delete(self, category_id: int) -> bool:
        self.pending = True
        self.error_message = None
        try:
            await self._client.delete_category(category_id)
        except ApiError as e:
            self._mutation_failed("delete", e, category_id)
            return False
        finally:
            self.pending = False

        self.categories = [c for c in self.categories if c.id != category_id]
        self._activity.log(AuditEventBuilder.entity_deleted("category", category_id))
        return True
