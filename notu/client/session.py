"""
Session Manager.

Wraps the transport with authentication:

    1. Attach the access credential as a bearer header.
    2. Issue the call.
    3. On 401 + {"code": "TOKEN_EXPIRED"} (first attempt only), exchange the
       refresh credential for a new pair and retry the call exactly once.
    4. Anything else that is not 2xx becomes an HttpError.

When the session cannot be renewed, credentials are cleared and one
SessionEnded event is published on the injected bus. The session manager
never calls into application state directly.
"""

from typing import Any

from pydantic import ValidationError

from notu.client.transport import HttpTransport, decode_body, decode_error
from notu.core.concurrency import SingleFlight
from notu.core.exceptions import ApplicationError, HttpError, SessionExpiredError
from notu.core.logging import get_logger, log_with_source
from notu.events.bus import EventBus
from notu.events.schemas import SessionEnded
from notu.schemas.user import AuthResult, Credentials, UserIdentity
from notu.storage.credentials import CredentialStore

logger = get_logger(__name__)

TOKEN_EXPIRED = "TOKEN_EXPIRED"
REFRESH_PATH = "/auth/refresh"


class SessionManager:
    """
    Auth-aware request layer.

    Usage:
        session = SessionManager(transport, credential_store, bus)
        notes = await session.get("/notes")
    """

    def __init__(
        self,
        transport: HttpTransport,
        credentials: CredentialStore,
        bus: EventBus,
    ) -> None:
        self.transport = transport
        self.credentials = credentials
        self.bus = bus
        self._flight = SingleFlight("session")

    @property
    def is_authenticated(self) -> bool:
        return self.credentials.get_credentials() is not None

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def start_session(self, auth: AuthResult) -> UserIdentity:
        """Store the credential pair and identity from a login/registration."""
        self.credentials.set_credentials(auth.credentials)
        self.credentials.set_user(auth.user)
        log_with_source(logger, "session", "info", "Session started", user_id=auth.user.id)
        return auth.user

    def clear_session(self) -> None:
        """Forget credentials without announcing it (voluntary logout)."""
        self.credentials.clear()
        log_with_source(logger, "session", "info", "Session cleared")

    def end_session(self, reason: str = "expired") -> None:
        """Forget credentials and announce that the session is over."""
        self.credentials.clear()
        log_with_source(logger, "session", "warning", "Session ended", reason=reason)
        self.bus.publish(
            SessionEnded(source="session-manager", payload={"reason": reason}),
        )

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Make a call, renewing the session once if the access token expired.

        Args:
            method: HTTP method
            path: API path
            json: Request body
            params: Query parameters
            authenticated: Attach the bearer credential when one is stored

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            NetworkError: Transport failure
            HttpError: Non-2xx response
            SessionExpiredError: The session could not be renewed
        """
        response = await self._send(method, path, json, params, authenticated)

        if response.status_code == 401 and authenticated:
            _, code = decode_error(response)
            if code == TOKEN_EXPIRED:
                await self._refresh()
                response = await self._send(method, path, json, params, authenticated)
                if response.status_code == 401:
                    self.end_session("retry_rejected")
                    raise SessionExpiredError()

        if not response.is_success:
            message, code = decode_error(response)
            raise HttpError(response.status_code, message, code)

        return decode_body(response)

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def _send(
        self,
        method: str,
        path: str,
        json: Any,
        params: dict[str, Any] | None,
        authenticated: bool,
    ):
        headers: dict[str, str] = {}
        if authenticated:
            credentials = self.credentials.get_credentials()
            if credentials is not None:
                headers["Authorization"] = f"Bearer {credentials.access_token}"

        kwargs: dict[str, Any] = {"headers": headers}
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = params
        return await self.transport.request(method, path, **kwargs)

    # -------------------------------------------------------------------------
    # Refresh exchange
    # -------------------------------------------------------------------------

    async def _refresh(self) -> Credentials:
        """Renew the credential pair; concurrent callers share one exchange."""
        return await self._flight.do("refresh", self._exchange_refresh_token)

    async def _exchange_refresh_token(self) -> Credentials:
        current = self.credentials.get_credentials()
        if current is None:
            self.end_session("refresh_failed")
            raise SessionExpiredError()

        log_with_source(logger, "session", "info", "Access token expired, refreshing")
        try:
            response = await self.transport.post(
                REFRESH_PATH,
                json={"refreshToken": current.refresh_token},
            )
            if not response.is_success:
                message, _ = decode_error(response)
                raise HttpError(response.status_code, message)
            renewed = Credentials.model_validate(decode_body(response))
        except (ApplicationError, ValidationError) as e:
            log_with_source(
                logger, "session", "warning", "Refresh exchange failed",
                error=e.__class__.__name__,
            )
            self.end_session("refresh_failed")
            raise SessionExpiredError() from e

        self.credentials.set_credentials(renewed)
        log_with_source(logger, "session", "info", "Credentials refreshed")
        return renewed
