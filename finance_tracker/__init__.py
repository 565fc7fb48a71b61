"""
Personal Finance Tracker - Client Package

A client for the personal finance tracker REST API: authentication,
categories, transactions and monthly budgets.

DESIGN PRINCIPLES:
1. The server is the source of truth for every entity
2. Local state changes only after the server confirms
3. Failures are shown to the user, never swallowed
4. The credential is an explicit object, never ambient state
5. Controllers are UI-agnostic; the front end only renders their state
"""

__version__ = "1.0.0"
__author__ = "Personal Finance Tracker Team"
