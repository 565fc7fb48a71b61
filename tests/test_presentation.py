"""
Tests for screen presentation rules and application wiring.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from finance_tracker.auth import Session
from finance_tracker.config import ApiSettings
from finance_tracker.models.finance import Category
from finance_tracker.models.forms import BudgetForm
from finance_tracker.orchestrator import create_app_components
from finance_tracker.presentation import (
    MISSING_CATEGORY_LABEL,
    ListState,
    can_submit_budget,
    category_label,
    empty_budgets_title,
    format_amount,
    list_state,
)
from finance_tracker.services.api import ApiClient


CATEGORIES = [
    Category(id=1, name="Groceries", type="expense"),
    Category(id=2, name="Rent", type="expense"),
]


class TestListState:
    """Loading, empty and list are mutually exclusive."""

    def test_loading_wins_over_cached_rows(self):
        assert list_state(True, [object()]) is ListState.LOADING

    def test_empty(self):
        assert list_state(False, []) is ListState.EMPTY

    def test_list(self):
        assert list_state(False, [object()]) is ListState.LIST


class TestLabels:
    """Tests for display text."""

    def test_category_label(self):
        assert category_label(CATEGORIES, 2) == "Rent"

    def test_missing_category(self):
        """Test absent and deleted categories render a placeholder."""
        assert category_label(CATEGORIES, None) == MISSING_CATEGORY_LABEL
        assert category_label(CATEGORIES, 99) == MISSING_CATEGORY_LABEL

    @pytest.mark.parametrize("value, symbol, expected", [
        (Decimal("350.5"), "", "350.50"),
        (Decimal("1234567.891"), "$", "$1,234,567.89"),
        (Decimal("0"), "€", "€0.00"),
    ])
    def test_format_amount(self, value, symbol, expected):
        assert format_amount(value, symbol) == expected

    def test_empty_title(self):
        assert empty_budgets_title("2025-03") == "No budgets for March 2025"


class TestCanSubmitBudget:
    """The create action is enabled only for a usable form."""

    def test_complete_form(self):
        assert can_submit_budget(BudgetForm(category_id=1, limit_amount="250.5"), pending=False)

    def test_pending(self):
        assert not can_submit_budget(BudgetForm(category_id=1, limit_amount="250.5"), pending=True)

    @pytest.mark.parametrize("form", [
        BudgetForm(category_id=None, limit_amount="10"),
        BudgetForm(category_id=1, limit_amount=""),
        BudgetForm(category_id=1, limit_amount="ten"),
        BudgetForm(category_id=1, limit_amount="-1"),
    ])
    def test_incomplete_or_negative(self, form):
        assert not can_submit_budget(form, pending=False)


class TestAppComponents:
    """Tests for wiring the controllers to one session."""

    def test_controllers_share_client_and_session(self):
        settings = ApiSettings(_env_file=None, base_url="http://api.test/api")
        components = create_app_components(api_settings=settings, period="2025-03")

        assert components.client.session is components.session
        assert components.budgets.period == "2025-03"
        assert components.transactions.period == "2025-03"
        assert components.dashboard.period == "2025-03"
        assert not components.auth.is_authenticated

        components.session.sign_in("jwt", 7)
        assert components.auth.is_authenticated

    def test_fresh_components_have_nothing_loaded(self):
        """Test new components (e.g. after logout) load every screen again."""
        settings = ApiSettings(_env_file=None, base_url="http://api.test/api")
        components = create_app_components(session=Session("jwt"), api_settings=settings)

        for ctrl in (components.budgets, components.categories,
                     components.transactions, components.dashboard):
            assert ctrl.loaded is False

    def test_prebuilt_client_brings_its_session(self):
        http = MagicMock()
        http.headers = {}
        session = Session("jwt")
        client = ApiClient(session, settings=ApiSettings(_env_file=None), http=http)

        components = create_app_components(client=client)

        assert components.session is session
        assert components.budgets._client is client


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
