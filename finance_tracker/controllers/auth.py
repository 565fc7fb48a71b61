"""
Authentication Controller

Drives the login and register forms. A successful login stores the token on
the shared Session; every other controller's requests pick it up from there.
"""

from typing import Optional

from pydantic import ValidationError

from finance_tracker.audit import ActivityLogger
from finance_tracker.auth import Session
from finance_tracker.controllers.base import ViewController
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.services.api import ApiClient, ApiError

LOGIN_FAILED_MESSAGE = "Login failed"
REGISTER_FAILED_MESSAGE = "Registration failed"


class AuthController(ViewController):
    """Login / register / logout against the API, storing the token on the Session."""

    entity_type = "session"

    def __init__(
        self,
        client: ApiClient,
        session: Session,
        activity: Optional[ActivityLogger] = None,
    ):
        super().__init__(client, activity)
        self._session = session
        self.busy = False

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    async def login(self, email: str, password: str) -> bool:
        self.busy = True
        self.error_message = None
        try:
            token = await self._client.login(email, password)
        except ValidationError:
            self.error_message = "Enter your email and password."
            return False
        except ApiError as e:
            self.error_message = e.message or LOGIN_FAILED_MESSAGE
            self._activity.log(AuditEventBuilder.auth_failed("login", e.message, e.status_code))
            return False
        finally:
            self.busy = False

        self._session.sign_in(token.token, token.id)
        self._activity.log(AuditEventBuilder.logged_in(token.id))
        return True

    async def register(self, name: str, email: str, password: str) -> bool:
        """
        Create an account. The user still logs in afterwards; any token
        returned by registration is ignored.
        """
        self.busy = True
        self.error_message = None
        try:
            data = await self._client.register(name, email, password)
        except ValidationError:
            self.error_message = (
                "Enter a name, a valid email and a password of 6 to 72 characters."
            )
            return False
        except ApiError as e:
            self.error_message = e.message or REGISTER_FAILED_MESSAGE
            self._activity.log(AuditEventBuilder.auth_failed("register", e.message, e.status_code))
            return False
        finally:
            self.busy = False

        user_id = data.get("id") if isinstance(data, dict) else None
        self._activity.log(AuditEventBuilder.registered(user_id))
        return True

    def logout(self) -> None:
        self._session.sign_out()
        self.error_message = None
        self._activity.log(AuditEventBuilder.logged_out())
