"""
Application wiring for the Finance Tracker client

This module builds one Session, one ApiClient bound to it, one activity
logger, and a controller per screen, all sharing the same client.

DESIGN DECISION: The Session is created here and passed down explicitly.
Logging in through the AuthController makes every other controller's
requests authenticated, because they all hold the same ApiClient.
"""

from dataclasses import dataclass
from typing import Optional

from finance_tracker.audit import ActivityLogger, configure_logging
from finance_tracker.auth import Session
from finance_tracker.config import ApiSettings, get_settings
from finance_tracker.controllers import (
    AuthController,
    BudgetViewController,
    CategoryViewController,
    DashboardController,
    TransactionViewController,
)
from finance_tracker.services.api import ApiClient


@dataclass
class AppComponents:
    """Everything one UI session needs."""

    session: Session
    client: ApiClient
    activity: ActivityLogger
    auth: AuthController
    budgets: BudgetViewController
    categories: CategoryViewController
    transactions: TransactionViewController
    dashboard: DashboardController


def create_app_components(
    session: Optional[Session] = None,
    api_settings: Optional[ApiSettings] = None,
    client: Optional[ApiClient] = None,
    period: Optional[str] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        session: Existing session to reuse; a fresh anonymous one otherwise
        api_settings: Override for the API settings (mainly for tests)
        client: Prebuilt API client; must be bound to `session` if both are given
        period: Initial month for the month-scoped screens (YYYY-MM)
    """
    app_settings = get_settings().app
    configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    if client is not None:
        session = client.session
    else:
        session = session or Session()
        client = ApiClient(session, settings=api_settings)

    activity = ActivityLogger()

    return AppComponents(
        session=session,
        client=client,
        activity=activity,
        auth=AuthController(client, session, activity),
        budgets=BudgetViewController(client, activity, period=period),
        categories=CategoryViewController(client, activity),
        transactions=TransactionViewController(client, activity, period=period),
        dashboard=DashboardController(client, activity, period=period),
    )
