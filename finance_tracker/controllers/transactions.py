"""
Transactions View Controller

Month-scoped list of income and expense records, with the same stale-load
guard as the budgets screen: only the latest issued load may write state.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from pydantic import ValidationError

from finance_tracker.audit import ActivityLogger, create_correlation_id
from finance_tracker.controllers.base import LoadSequence, ViewController, gather_all
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.finance import (
    Category,
    CategoryType,
    Transaction,
    TransactionPayload,
)
from finance_tracker.models.forms import parse_amount
from finance_tracker.models.period import current_period, period_to_date, validate_period
from finance_tracker.services.api import ApiClient, ApiError


class TransactionViewController(ViewController):
    """Controller for the transactions screen."""

    entity_type = "transaction"

    def __init__(
        self,
        client: ApiClient,
        activity: Optional[ActivityLogger] = None,
        period: Optional[str] = None,
    ):
        super().__init__(client, activity)
        self.period: str = validate_period(period) if period else current_period()
        self.transactions: list[Transaction] = []
        self.categories: list[Category] = []
        self.pending = False
        self.fetching = False
        self._loads = LoadSequence()

    def _total(self, category_type: CategoryType) -> Decimal:
        return sum(
            (t.amount for t in self.transactions if t.type == category_type),
            Decimal("0"),
        )

    @property
    def income_total(self) -> Decimal:
        return self._total(CategoryType.INCOME)

    @property
    def expense_total(self) -> Decimal:
        return self._total(CategoryType.EXPENSE)

    def categories_for(self, category_type: CategoryType) -> list[Category]:
        return [c for c in self.categories if c.type == category_type]

    async def set_period(self, period: str) -> None:
        await self.load(validate_period(period))

    async def load(self, period: Optional[str] = None) -> None:
        if period is not None:
            self.period = validate_period(period)

        ticket = self._loads.issue()
        requested = self.period
        correlation_id = create_correlation_id()
        self.fetching = True
        self.error_message = None

        try:
            try:
                transactions, categories = await gather_all(
                    self._client.list_transactions(requested),
                    self._client.list_categories(),
                )
            except ApiError as e:
                if not self._loads.is_current(ticket):
                    self._activity.log(
                        AuditEventBuilder.stale_load_discarded("transactions", requested, self.period, ticket)
                    )
                    return
                self.transactions = []
                self.error_message = e.message
                self._activity.log(
                    AuditEventBuilder.load_failed(
                        "transactions", requested, e.message, e.status_code, correlation_id
                    )
                )
                return

            if not self._loads.is_current(ticket):
                self._activity.log(
                    AuditEventBuilder.stale_load_discarded("transactions", requested, self.period, ticket)
                )
                return

            self.transactions = transactions
            self.categories = categories
            self._activity.log(
                AuditEventBuilder.data_loaded("transactions", requested, len(transactions), correlation_id)
            )
        finally:
            if self._loads.is_current(ticket):
                self.fetching = False
                self.loaded = True

    def _payload(
        self,
        amount: str,
        category_type: Union[CategoryType, str],
        on: Optional[date],
        category_id: Optional[int],
        description: Optional[str],
    ) -> Optional[TransactionPayload]:
        value = parse_amount(amount)
        if value is None:
            return None
        if value < 0:
            self._reject_input("amount", "Amount cannot be negative; choose income or expense instead.")
            return None

        try:
            return TransactionPayload(
                amount=value,
                type=category_type,
                date=on or period_to_date(self.period),
                category_id=category_id,
                description=description or None,
            )
        except ValidationError:
            self._reject_input("type", "Choose whether this is income or an expense.")
            return None

    async def create(
        self,
        amount: str,
        category_type: Union[CategoryType, str],
        on: Optional[date] = None,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Optional[Transaction]:
        """
        Record a transaction. Defaults to the first day of the selected month.

        Empty or non-numeric amounts are ignored; negative ones are rejected
        with a message (the type carries the direction).
        """
        payload = self._payload(amount, category_type, on, category_id, description)
        if payload is None:
            return None

        self.pending = True
        self.error_message = None
        try:
            transaction = await self._client.create_transaction(payload)
        except ApiError as e:
            self._mutation_failed("create", e)
            return None
        finally:
            self.pending = False

        if transaction.date.strftime("%Y-%m") == self.period:
            self.transactions = [transaction, *self.transactions]
        self._activity.log(
            AuditEventBuilder.entity_created(
                "transaction",
                transaction.id,
                {"type": transaction.type.value, "amount": str(transaction.amount)},
            )
        )
        return transaction

    async def update(
        self,
        transaction_id: int,
        amount: str,
        category_type: Union[CategoryType, str],
        on: Optional[date] = None,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Optional[Transaction]:
        """
        Replace a transaction with new values.

        Same input rules as create. A transaction moved to another month
        leaves this month's list.
        """
        payload = self._payload(amount, category_type, on, category_id, description)
        if payload is None:
            return None

        self.pending = True
        self.error_message = None
        try:
            updated = await self._client.update_transaction(transaction_id, payload)
        except ApiError as e:
            self._mutation_failed("update", e, transaction_id)
            return None
        finally:
            self.pending = False

        if updated.date.strftime("%Y-%m") == self.period:
            self.transactions = [updated if t.id == transaction_id else t for t in self.transactions]
        else:
            self.transactions = [t for t in self.transactions if t.id != transaction_id]
        self._activity.log(
            AuditEventBuilder.entity_updated(
                "transaction",
                transaction_id,
                {"type": updated.type.value, "amount": str(updated.amount)},
            )
        )
        return updated

    async def delete(self, transaction_id: int) -> bool:
        self.pending = True
        self.error_message = None
        try:
            await self._client.delete_transaction(transaction_id)
        except ApiError as e:
            self._mutation_failed("delete", e, transaction_id)
            return False
        finally:
            self.pending = False

        self.transactions = [t for t in self.transactions if t.id != transaction_id]
        self._activity.log(AuditEventBuilder.entity_deleted("transaction", transaction_id))
        return True
