"""Dashboard controller: income/expense totals for one month."""

from typing import Optional

from finance_tracker.audit import ActivityLogger
from finance_tracker.controllers.base import LoadSequence, ViewController
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.finance import MonthSummary
from finance_tracker.models.period import current_period, validate_period
from finance_tracker.services.api import ApiClient, ApiError


class DashboardController(ViewController):

    entity_type = "summary"

    def __init__(
        self,
        client: ApiClient,
        activity: Optional[ActivityLogger] = None,
        period: Optional[str] = None,
    ):
        super().__init__(client, activity)
        self.period: str = validate_period(period) if period else current_period()
        self.summary: Optional[MonthSummary] = None
        self.fetching = False
        self._loads = LoadSequence()

    async def load(self, period: Optional[str] = None) -> None:
        if period is not None:
            self.period = validate_period(period)

        ticket = self._loads.issue()
        requested = self.period
        self.fetching = True
        self.error_message = None
        try:
            summary = await self._client.month_summary(requested)
        except ApiError as e:
            if self._loads.is_current(ticket):
                self.summary = None
                self.error_message = e.message
                self._activity.log(
                    AuditEventBuilder.load_failed("summary", requested, e.message, e.status_code)
                )
            return
        finally:
            if self._loads.is_current(ticket):
                self.fetching = False
                self.loaded = True

        if self._loads.is_current(ticket):
            self.summary = summary
            self._activity.log(AuditEventBuilder.data_loaded("summary", requested, 1))
        else:
            self._activity.log(
                AuditEventBuilder.stale_load_discarded("summary", requested, self.period, ticket)
            )
