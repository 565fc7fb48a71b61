"""
REST API Client

This client handles:
1. Building URLs against the configured API base
2. Attaching the session's bearer token
3. Serializing request bodies as JSON
4. Turning every non-2xx answer and every network failure into ApiError
5. Validating response payloads into our models

DESIGN DECISION: No retries, no caching, no de-duplication.
Every call is exactly one HTTP round trip and its failure goes straight back
to the caller, which decides what to show the user.

Calls are made with requests in a worker thread (asyncio.to_thread), so a
controller can await several of them concurrently without blocking the
event loop.
"""

import asyncio
import threading
import time
from typing import Any, Optional, Type, TypeVar
from urllib.parse import urlencode

import requests
import structlog
from pydantic import BaseModel, ValidationError

from finance_tracker.auth import Session
from finance_tracker.config import ApiSettings, get_settings
from finance_tracker.models.finance import (
    AuthToken,
    Budget,
    BudgetCreate,
    BudgetUpdate,
    Category,
    CategoryPayload,
    LoginRequest,
    MonthSummary,
    RegisterRequest,
    Transaction,
    TransactionPayload,
)
from finance_tracker.models.period import validate_period

ModelT = TypeVar("ModelT", bound=BaseModel)

# Fields the backend uses for human-readable error text, most specific first
ERROR_MESSAGE_FIELDS = ("msg", "error", "message")


class FinanceClientError(Exception):
    """Base exception for client errors."""
    pass


class ApiError(FinanceClientError):
    """
    An API call did not succeed.

    Raised for non-2xx responses (status_code set) and for network
    failures (status_code None). `message` is suitable for display.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None


def _extract_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        for field in ERROR_MESSAGE_FIELDS:
            value = data.get(field)
            if isinstance(value, str) and value:
                return value

    text = (response.text or "").strip()
    if text and len(text) <= 200 and data is None:
        return text
    return f"Request failed with status {response.status_code}"


class ApiClient:
    """
    HTTP client for the finance tracker backend.

    IMPORTANT BOUNDARIES:
    1. This client only talks HTTP - it never touches controller state
    2. The token comes from the injected Session, nowhere else
    3. A 401 on an authenticated call signs the Session out

    requests.Session is not documented as thread-safe, and calls run on
    worker threads, so each worker thread gets its own HTTP session unless
    one is injected.
    """

    def __init__(
        self,
        session: Session,
        settings: Optional[ApiSettings] = None,
        http: Optional[requests.Session] = None,
    ):
        self._session = session
        self._settings = settings or get_settings().api
        self._http = http
        if http is not None:
            http.headers.update({"User-Agent": self._settings.user_agent})
        self._local = threading.local()
        self._opened: list[requests.Session] = []
        self._opened_lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)

    @property
    def session(self) -> Session:
        return self._session

    def _transport(self) -> requests.Session:
        if self._http is not None:
            return self._http
        http = getattr(self._local, "http", None)
        if http is None:
            http = requests.Session()
            http.headers.update({"User-Agent": self._settings.user_agent})
            self._local.http = http
            with self._opened_lock:
                self._opened.append(http)
        return http

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._settings.base_url}{path}"

    def _send(
        self,
        method: str,
        path: str,
        body: Any,
        authenticated: bool,
    ) -> Any:
        """Perform one blocking round trip. Runs in a worker thread."""
        headers = {"Accept": "application/json"}
        # Snapshot so a 401 is matched to the token actually sent
        token = self._session.token if authenticated else None
        headers.update(Session.bearer_header(token))

        started = time.monotonic()
        try:
            response = self._transport().request(
                method,
                self._url(path),
                json=body,
                headers=headers,
                timeout=self._settings.timeout_seconds,
            )
        except requests.Timeout as exc:
            self._logger.warning("api_timeout", method=method, path=path)
            raise ApiError("The server took too long to respond") from exc
        except requests.RequestException as exc:
            self._logger.warning("api_network_error", method=method, path=path, error=str(exc))
            raise ApiError(f"Could not reach the server: {exc}") from exc

        elapsed_ms = round((time.monotonic() - started) * 1000, 1)
        status = response.status_code

        if not 200 <= status < 300:
            message = _extract_message(response)
            self._logger.warning(
                "api_request_failed",
                method=method,
                path=path,
                status=status,
                error=message,
                elapsed_ms=elapsed_ms,
            )
            if status == 401 and authenticated:
                self._session.invalidate(token)
            try:
                payload = response.json()
            except ValueError:
                payload = None
            raise ApiError(message, status_code=status, payload=payload)

        self._logger.debug(
            "api_request",
            method=method,
            path=path,
            status=status,
            elapsed_ms=elapsed_ms,
        )

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                "Server returned an invalid JSON response",
                status_code=status,
            ) from exc

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        *,
        authenticated: bool = True,
    ) -> Any:
        """
        Issue a request and return the parsed JSON payload.

        Args:
            path: Path relative to the API base, e.g. "/budgets/3"
            method: HTTP method
            body: JSON-serializable request body, or None for no body
            authenticated: Attach the session's bearer token when present

        Returns:
            Parsed JSON, or None for 204 / empty responses

        Raises:
            ApiError: On a non-2xx status, network failure or bad JSON
        """
        return await asyncio.to_thread(
            self._send, method.upper(), path, body, authenticated
        )

    async def request_list(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
    ) -> list:
        """Like request(), but the payload must be a JSON array (null counts as empty)."""
        data = await self.request(path, method, body)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ApiError(
                f"Expected a list from {path}, got {type(data).__name__}",
                payload=data,
            )
        return data

    # -------------------------------------------------------------------------
    # Response validation
    # -------------------------------------------------------------------------

    def _parse(self, model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ApiError(
                f"Unexpected {model.__name__} payload from server",
                payload=data,
            ) from exc

    def _parse_list(self, model: Type[ModelT], items: list) -> list[ModelT]:
        return [self._parse(model, item) for item in items]

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def login(self, email: str, password: str) -> AuthToken:
        body = LoginRequest(email=email, password=password).model_dump()
        data = await self.request("/login", "POST", body, authenticated=False)
        return self._parse(AuthToken, data)

    async def register(self, name: str, email: str, password: str) -> Any:
        """Create an account. The response payload is returned unvalidated."""
        body = RegisterRequest(name=name, email=email, password=password).model_dump()
        return await self.request("/register", "POST", body, authenticated=False)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        return self._parse_list(Category, await self.request_list("/categories"))

    async def create_category(self, payload: CategoryPayload) -> Category:
        data = await self.request("/categories", "POST", payload.model_dump(mode="json"))
        return self._parse(Category, data)

    async def update_category(self, category_id: int, payload: CategoryPayload) -> Category:
        data = await self.request(
            f"/categories/{category_id}", "PUT", payload.model_dump(mode="json")
        )
        return self._parse(Category, data)

    async def delete_category(self, category_id: int) -> None:
        await self.request(f"/categories/{category_id}", "DELETE")

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def list_budgets(self, month: str) -> list[Budget]:
        query = urlencode({"month": validate_period(month)})
        return self._parse_list(Budget, await self.request_list(f"/budgets?{query}"))

    async def create_budget(self, payload: BudgetCreate) -> Budget:
        data = await self.request("/budgets", "POST", payload.model_dump(mode="json"))
        return self._parse(Budget, data)

    async def update_budget(self, budget_id: int, payload: BudgetUpdate) -> Budget:
        data = await self.request(f"/budgets/{budget_id}", "PUT", payload.to_payload())
        return self._parse(Budget, data)

    async def delete_budget(self, budget_id: int) -> None:
        await self.request(f"/budgets/{budget_id}", "DELETE")

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self, month: Optional[str] = None) -> list[Transaction]:
        path = "/transactions"
        if month is not None:
            path = f"{path}?{urlencode({'month': validate_period(month)})}"
        return self._parse_list(Transaction, await self.request_list(path))

    async def create_transaction(self, payload: TransactionPayload) -> Transaction:
        data = await self.request("/transactions", "POST", payload.to_payload())
        return self._parse(Transaction, data)

    async def update_transaction(self, transaction_id: int, payload: TransactionPayload) -> Transaction:
        data = await self.request(
            f"/transactions/{transaction_id}", "PUT", payload.to_payload()
        )
        return self._parse(Transaction, data)

    async def delete_transaction(self, transaction_id: int) -> None:
        await self.request(f"/transactions/{transaction_id}", "DELETE")

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    async def month_summary(self, month: str) -> MonthSummary:
        query = urlencode({"month": validate_period(month)})
        data = await self.request(f"/dashboard/summary?{query}")
        return self._parse(MonthSummary, data)

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
        with self._opened_lock:
            opened, self._opened = self._opened, []
        for http in opened:
            http.close()
