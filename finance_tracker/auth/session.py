"""
Authentication Session

DESIGN DECISION: The bearer token lives on an explicit Session object that is
handed to the API client at construction. Nothing reads a token from
global storage, so two sessions (or a test and the app) never share one.

The UI owns the Session's lifetime: it is created with the app components,
filled by a successful login, and emptied by logout or by the API client
when the server answers 401.

The API client reads and clears the token from worker threads, so every
access goes through a lock.
"""

import threading
from typing import Optional


class Session:
    """Holds the current user's bearer token, if any."""

    def __init__(self, token: Optional[str] = None, user_id: Optional[int] = None):
        self._token = token or None
        self._user_id = user_id
        self._lock = threading.Lock()

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._token

    @property
    def user_id(self) -> Optional[int]:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def sign_in(self, token: str, user_id: Optional[int] = None) -> None:
        if not token:
            raise ValueError("Cannot sign in with an empty token")
        with self._lock:
            self._token = token
            self._user_id = user_id

    def sign_out(self) -> None:
        with self._lock:
            self._token = None
            self._user_id = None

    def invalidate(self, token: Optional[str]) -> bool:
        """
        Sign out only if `token` is still the current credential.

        A 401 for a request sent with an older token must not end a session
        that has since signed in again. Returns True if the session was cleared.
        """
        with self._lock:
            if token is None or token != self._token:
                return False
            self._token = None
            self._user_id = None
            return True

    @staticmethod
    def bearer_header(token: Optional[str]) -> dict[str, str]:
        """Header dict carrying `token`; empty when there is none."""
        if token is None:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def __repr__(self) -> str:
        state = "authenticated" if self.is_authenticated else "anonymous"
        return f"<Session {state} user_id={self._user_id}>"
