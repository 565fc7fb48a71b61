"""
Tests for the REST API client.

The requests.Session is replaced by a mock returning real
requests.Response objects, so status and JSON handling are exercised
without any network.
"""

import asyncio
import json
import threading
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from finance_tracker.auth import Session
from finance_tracker.config import ApiSettings
from finance_tracker.models.finance import (
    BudgetCreate,
    BudgetUpdate,
    CategoryPayload,
    TransactionPayload,
)
from finance_tracker.services.api import ApiClient, ApiError


BASE_URL = "http://api.test/api"


def make_response(status, payload=None, text=None):
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    elif text is not None:
        response._content = text.encode("utf-8")
    else:
        response._content = b""
    return response


def make_client(response=None, token="secret-token"):
    http = MagicMock()
    http.headers = {}
    if response is not None:
        http.request.return_value = response
    session = Session(token)
    settings = ApiSettings(base_url=BASE_URL + "/", timeout_seconds=5)
    return ApiClient(session, settings=settings, http=http), http, session


def sent(http):
    """(method, url, kwargs) of the last request."""
    call = http.request.call_args
    return call.args[0], call.args[1], call.kwargs


BUDGET_JSON = {
    "id": 42,
    "user_id": 7,
    "category_id": 1,
    "period_month": "2025-03",
    "limit_amount": 250.5,
    "created_at": "2025-03-01T10:00:00Z",
}


class TestRequest:
    """Tests for the generic request operation."""

    def test_attaches_bearer_token(self):
        """Test the session token is sent as a bearer credential."""
        client, http, _ = make_client(make_response(200, []))

        asyncio.run(client.request("/categories"))

        method, url, kwargs = sent(http)
        assert method == "GET"
        assert url == f"{BASE_URL}/categories"
        assert kwargs["headers"]["Authorization"] == "Bearer secret-token"
        assert kwargs["json"] is None
        assert kwargs["timeout"] == 5

    def test_no_authorization_when_signed_out(self):
        """Test no Authorization header is sent without a token."""
        client, http, _ = make_client(make_response(200, []), token=None)

        asyncio.run(client.request("categories"))

        _, url, kwargs = sent(http)
        assert url == f"{BASE_URL}/categories"
        assert "Authorization" not in kwargs["headers"]

    def test_returns_parsed_json(self):
        client, _, _ = make_client(make_response(201, {"id": 1}))
        assert asyncio.run(client.request("/x", "POST", {"a": 1})) == {"id": 1}

    def test_no_content_returns_none(self):
        client, _, _ = make_client(make_response(204))
        assert asyncio.run(client.request("/budgets/3", "DELETE")) is None

    def test_error_message_from_body(self):
        """Test the server's error field becomes the ApiError message."""
        client, _, _ = make_client(make_response(409, {"error": "budget_exists"}))

        with pytest.raises(ApiError) as exc_info:
            asyncio.run(client.request("/budgets", "POST", {}))

        assert exc_info.value.message == "budget_exists"
        assert exc_info.value.status_code == 409
        assert exc_info.value.payload == {"error": "budget_exists"}

    def test_msg_preferred_over_error_code(self):
        """Test the human-readable msg wins over the machine code."""
        body = {
            "error": "category_has_budgets",
            "msg": "Delete or reassign budgets for this category before deleting it.",
        }
        client, _, _ = make_client(make_response(409, body))

        with pytest.raises(ApiError, match="Delete or reassign"):
            asyncio.run(client.request("/categories/1", "DELETE"))

    def test_error_without_body(self):
        client, _, _ = make_client(make_response(502))

        with pytest.raises(ApiError, match="Request failed with status 502"):
            asyncio.run(client.request("/categories"))

    def test_network_failure(self):
        """Test connection errors surface as ApiError without a status."""
        client, http, _ = make_client()
        http.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(ApiError) as exc_info:
            asyncio.run(client.request("/categories"))

        assert exc_info.value.status_code is None
        assert exc_info.value.is_network_error
        assert "connection refused" in exc_info.value.message

    def test_timeout(self):
        client, http, _ = make_client()
        http.request.side_effect = requests.Timeout()

        with pytest.raises(ApiError, match="too long"):
            asyncio.run(client.request("/categories"))

    def test_invalid_json_on_success(self):
        client, _, _ = make_client(make_response(200, text="<html>oops</html>"))

        with pytest.raises(ApiError, match="invalid JSON"):
            asyncio.run(client.request("/categories"))

    def test_unauthorized_signs_session_out(self):
        """Test a 401 on an authenticated call drops the token."""
        client, _, session = make_client(make_response(401, {"error": "unauthorized"}))

        with pytest.raises(ApiError):
            asyncio.run(client.request("/categories"))

        assert session.is_authenticated is False

    def test_unauthorized_for_replaced_token_keeps_new_session(self):
        """Test a 401 for a request sent before a fresh login does not log the user out."""
        client, http, session = make_client(token="old-token")

        def respond(method, url, **kwargs):
            session.sign_in("new-token", 8)
            return make_response(401, {"error": "unauthorized"})

        http.request.side_effect = respond

        with pytest.raises(ApiError):
            asyncio.run(client.request("/categories"))

        _, _, kwargs = sent(http)
        assert kwargs["headers"]["Authorization"] == "Bearer old-token"
        assert session.token == "new-token"

    def test_request_list_requires_array(self):
        client, _, _ = make_client(make_response(200, {"items": []}))

        with pytest.raises(ApiError, match="Expected a list"):
            asyncio.run(client.request_list("/categories"))

    def test_request_list_null_is_empty(self):
        client, _, _ = make_client(make_response(200, text="null"))
        assert asyncio.run(client.request_list("/budgets?month=2025-03")) == []


class TestTransport:
    """Tests for the HTTP sessions used by worker threads."""

    def test_each_thread_gets_its_own_http_session(self, monkeypatch):
        created = []

        def fake_session():
            http = MagicMock()
            http.headers = {}
            created.append(http)
            return http

        monkeypatch.setattr(requests, "Session", fake_session)
        settings = ApiSettings(base_url=BASE_URL, user_agent="tests/1.0")
        client = ApiClient(Session("jwt"), settings=settings)

        seen = []
        workers = [
            threading.Thread(target=lambda: seen.append((client._transport(), client._transport())))
            for _ in range(2)
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        assert len(created) == 2
        assert all(first is second for first, second in seen)
        assert seen[0][0] is not seen[1][0]
        assert all(http.headers["User-Agent"] == "tests/1.0" for http in created)

        client.close()
        for http in created:
            http.close.assert_called_once()

    def test_concurrent_requests_use_separate_sessions(self, monkeypatch):
        """Test two gathered calls never share an HTTP session."""
        created = []

        def fake_session():
            http = MagicMock()
            http.headers = {}
            http.request.return_value = make_response(200, [])
            created.append(http)
            return http

        monkeypatch.setattr(requests, "Session", fake_session)
        client = ApiClient(Session("jwt"), settings=ApiSettings(base_url=BASE_URL))
        barrier = threading.Barrier(2, timeout=5)
        original = client._send

        def send_together(*args):
            barrier.wait()
            return original(*args)

        monkeypatch.setattr(client, "_send", send_together)

        async def both():
            return await asyncio.gather(
                client.request("/categories"),
                client.request("/budgets?month=2025-03"),
            )

        assert asyncio.run(both()) == [[], []]
        used = [http for http in created if http.request.called]
        assert len(used) == 2


class TestBudgetEndpoints:
    """Tests for the typed budget helpers."""

    def test_list_budgets_filters_by_month(self):
        client, http, _ = make_client(make_response(200, [BUDGET_JSON]))

        budgets = asyncio.run(client.list_budgets("2025-03"))

        _, url, _ = sent(http)
        assert url == f"{BASE_URL}/budgets?month=2025-03"
        assert budgets[0].id == 42
        assert budgets[0].limit_amount == Decimal("250.5")

    def test_list_budgets_rejects_bad_month(self):
        client, http, _ = make_client(make_response(200, []))

        with pytest.raises(ValueError):
            asyncio.run(client.list_budgets("March"))

        http.request.assert_not_called()

    def test_create_budget_body(self):
        """Test the create body uses the backend's field names and a JSON number."""
        client, http, _ = make_client(make_response(201, BUDGET_JSON))
        payload = BudgetCreate(category_id=1, period_month="2025-03", limit_amount=Decimal("250.5"))

        budget = asyncio.run(client.create_budget(payload))

        method, url, kwargs = sent(http)
        assert (method, url) == ("POST", f"{BASE_URL}/budgets")
        assert kwargs["json"] == {"category_id": 1, "period_month": "2025-03", "limit_amount": 250.5}
        assert budget.id == 42

    def test_update_budget_omits_unset_category(self):
        client, http, _ = make_client(make_response(200, BUDGET_JSON))

        asyncio.run(client.update_budget(42, BudgetUpdate(limit_amount=Decimal("300"))))

        method, url, kwargs = sent(http)
        assert (method, url) == ("PUT", f"{BASE_URL}/budgets/42")
        assert kwargs["json"] == {"limit_amount": 300.0}

    def test_update_budget_with_category(self):
        client, http, _ = make_client(make_response(200, BUDGET_JSON))

        asyncio.run(client.update_budget(42, BudgetUpdate(limit_amount=Decimal("300"), category_id=3)))

        _, _, kwargs = sent(http)
        assert kwargs["json"] == {"limit_amount": 300.0, "category_id": 3}

    def test_delete_budget(self):
        client, http, _ = make_client(make_response(204))

        assert asyncio.run(client.delete_budget(42)) is None

        method, url, _ = sent(http)
        assert (method, url) == ("DELETE", f"{BASE_URL}/budgets/42")

    def test_malformed_budget_payload(self):
        """Test a response that doesn't match the model becomes ApiError."""
        client, _, _ = make_client(make_response(200, [{"id": "x"}]))

        with pytest.raises(ApiError, match="Unexpected Budget payload"):
            asyncio.run(client.list_budgets("2025-03"))


class TestOtherEndpoints:
    """Tests for auth, categories, transactions and the dashboard."""

    def test_login_sends_no_token(self):
        """Test login never carries a bearer token."""
        client, http, _ = make_client(make_response(200, {"id": 7, "token": "jwt"}))

        token = asyncio.run(client.login("a@example.com", "secret123"))

        method, url, kwargs = sent(http)
        assert (method, url) == ("POST", f"{BASE_URL}/login")
        assert kwargs["json"] == {"email": "a@example.com", "password": "secret123"}
        assert "Authorization" not in kwargs["headers"]
        assert token.token == "jwt"
        assert token.id == 7

    def test_failed_login_keeps_session(self):
        """Test a 401 from login does not touch the session."""
        client, _, session = make_client(make_response(401, {"error": "invalid_credentials"}))

        with pytest.raises(ApiError, match="invalid_credentials"):
            asyncio.run(client.login("a@example.com", "wrong"))

        assert session.is_authenticated is True

    def test_register(self):
        client, http, _ = make_client(make_response(200, {"id": 8, "token": "jwt"}))

        asyncio.run(client.register("Ana", "ana@example.com", "secret123"))

        _, url, kwargs = sent(http)
        assert url == f"{BASE_URL}/register"
        assert kwargs["json"] == {"name": "Ana", "email": "ana@example.com", "password": "secret123"}

    def test_create_category(self):
        client, http, _ = make_client(make_response(201, {"id": 3, "name": "Rent", "type": "expense"}))

        category = asyncio.run(client.create_category(CategoryPayload(name=" Rent ", type="expense")))

        _, _, kwargs = sent(http)
        assert kwargs["json"] == {"name": "Rent", "type": "expense"}
        assert category.id == 3

    def test_list_transactions_parses_timestamps(self):
        """Test RFC 3339 dates from the backend become plain dates."""
        row = {"id": 1, "user_id": 7, "amount": 12.5, "type": "expense",
               "date": "2025-03-04T00:00:00Z", "category_id": None}
        client, http, _ = make_client(make_response(200, [row]))

        transactions = asyncio.run(client.list_transactions("2025-03"))

        _, url, _ = sent(http)
        assert url == f"{BASE_URL}/transactions?month=2025-03"
        assert transactions[0].date.isoformat() == "2025-03-04"

    def test_update_transaction(self):
        row = {"id": 4, "amount": 20, "type": "income", "date": "2025-03-02T00:00:00Z"}
        client, http, _ = make_client(make_response(200, row))
        payload = TransactionPayload(amount=Decimal("20"), type="income", date=date(2025, 3, 2))

        transaction = asyncio.run(client.update_transaction(4, payload))

        method, url, kwargs = sent(http)
        assert (method, url) == ("PUT", f"{BASE_URL}/transactions/4")
        assert kwargs["json"] == {"amount": 20.0, "type": "income", "date": "2025-03-02"}
        assert transaction.id == 4

    def test_month_summary(self):
        body = {"month": "2025-03", "income_total": 1000, "expense_total": 400.25}
        client, http, _ = make_client(make_response(200, body))

        summary = asyncio.run(client.month_summary("2025-03"))

        _, url, _ = sent(http)
        assert url == f"{BASE_URL}/dashboard/summary?month=2025-03"
        assert summary.net == Decimal("599.75")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
