"""
Shared controller plumbing.

Every controller follows the same error policy: an ApiError raised by the
client is caught where the operation runs, logged as an audit event, and
its message stored in `error_message` for the UI. Nothing propagates to
the rendering layer.
"""

import asyncio
from typing import Optional

from finance_tracker.audit import ActivityLogger
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.services.api import ApiClient, ApiError


class LoadSequence:
    """
    Tags loads so only the most recently issued one may update state.

    A response whose ticket is no longer current belongs to a superseded
    request (e.g. the user changed month again) and must be discarded.
    """

    def __init__(self):
        self._latest = 0

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    @property
    def latest(self) -> int:
        return self._latest


async def gather_all(*calls):
    """
    Await every call to completion, then raise the first failure.

    Every call has settled before anything is raised; no call is left
    running after the caller returns.
    """
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class ViewController:
    """Base class holding the API client, the activity log and the error slot."""

    entity_type = "entity"

    def __init__(
        self,
        client: ApiClient,
        activity: Optional[ActivityLogger] = None,
    ):
        self._client = client
        self._activity = activity or ActivityLogger()
        self.error_message: Optional[str] = None
        # True once a load has settled, successfully or not
        self.loaded = False

    def clear_error(self) -> None:
        self.error_message = None

    def _mutation_failed(
        self,
        action: str,
        error: ApiError,
        entity_id: Optional[int] = None,
    ) -> None:
        self.error_message = error.message
        self._activity.log(
            AuditEventBuilder.mutation_failed(
                entity_type=self.entity_type,
                action=action,
                error_message=error.message,
                status_code=error.status_code,
                entity_id=entity_id,
            )
        )

    def _reject_input(self, field: str, message: str) -> None:
        self.error_message = message
        self._activity.log(
            AuditEventBuilder.input_rejected(self.entity_type, field, message)
        )
