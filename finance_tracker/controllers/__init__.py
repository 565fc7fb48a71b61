"""View controllers package."""

from finance_tracker.controllers.auth import AuthController
from finance_tracker.controllers.base import LoadSequence, ViewController
from finance_tracker.controllers.budgets import BudgetViewController
from finance_tracker.controllers.categories import CategoryViewController
from finance_tracker.controllers.dashboard import DashboardController
from finance_tracker.controllers.transactions import TransactionViewController

__all__ = [
    "AuthController",
    "BudgetViewController",
    "CategoryViewController",
    "DashboardController",
    "LoadSequence",
    "TransactionViewController",
    "ViewController",
]
