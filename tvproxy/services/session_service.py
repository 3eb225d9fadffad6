"""
Upstream Session Manager

Owns the credentials, the cookie-bearing HTTP client and the authentication
state for the single upstream account. Every privileged upstream call goes
through ensure_authenticated() first.

The state machine has two states. A session becomes AUTHENTICATED when the
login response carries the success marker, and is treated as
UNAUTHENTICATED again once the validity window has elapsed since that
login, which triggers a new login on the next use.
"""
import asyncio
import logging
import time
from collections.abc import Callable
from enum import Enum

import httpx

from tvproxy.exceptions import LoginError


logger = logging.getLogger(__name__)

LOGIN_PATH = "/user/login_page"
LOGIN_PARAM_USERNAME = "login_username"
LOGIN_PARAM_PASSWORD = "login_password"
LOGIN_PARAM_LOGIN = "login"
LOGIN_PARAM_LOGIN_TYPE = "login_type"
LOGIN_VALUE_LOGIN = "1"
LOGIN_VALUE_LOGIN_TYPE = "1"

LOGIN_SUCCESS_MARKER = "var LOGGED = '1'"

DEFAULT_VALIDITY_WINDOW_SEC = 8 * 60 * 60


class SessionState(str, Enum):
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class UpstreamSession:
    """
    Authenticated session against the upstream service.

    The "check expiry -> login -> update state" sequence runs under an
    asyncio.Lock, so concurrent requests that find the session expired
    wait for one login instead of each performing their own.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        username: str,
        password: str,
        base_url: str,
        validity_window_sec: float = DEFAULT_VALIDITY_WINDOW_SEC,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._validity_window_sec = validity_window_sec
        self._clock = clock
        self._lock = asyncio.Lock()
        self._state = SessionState.UNAUTHENTICATED
        self._last_authenticated_at: float | None = None
        self.login_attempts = 0
        self._last_login_ok = False
        self._completed_logins = 0

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @property
    def login_url(self) -> str:
        return self.url(LOGIN_PATH)

    @property
    def last_authenticated_at(self) -> float | None:
        return self._last_authenticated_at

    def current_state(self, now: float | None = None) -> SessionState:
        """Apply the time-guarded transition and return the effective state."""
        if self._state is SessionState.UNAUTHENTICATED or self._last_authenticated_at is None:
            return SessionState.UNAUTHENTICATED

        if now is None:
            now = self._clock()
        if now - self._last_authenticated_at >= self._validity_window_sec:
            return SessionState.UNAUTHENTICATED
        return SessionState.AUTHENTICATED

    def is_authenticated(self, now: float | None = None) -> bool:
        return self.current_state(now) is SessionState.AUTHENTICATED

    async def ensure_authenticated(self) -> bool:
        """
        Log in if the session is unauthenticated or expired

        A failed login is not raised: the session stays unauthenticated and
        False is returned, so callers decide whether to carry on regardless
        or to surface an error.

        Returns:
            True if the session is authenticated after the call
        """
        if self.is_authenticated():
            return True

        logins_seen = self._completed_logins

        async with self._lock:
            # Another request may have logged in while we waited
            if self.is_authenticated():
                return True
            # A login finished while we waited: share its outcome
            if self._completed_logins != logins_seen:
                return self._last_login_ok

            try:
                success = await self._login()
            except LoginError as e:
                logger.debug(f"Upstream login failed: {e}")
                success = False

            if success:
                self._state = SessionState.AUTHENTICATED
                self._last_authenticated_at = self._clock()
                logger.info("Upstream login successful")
            else:
                self._state = SessionState.UNAUTHENTICATED

            self._last_login_ok = success
            self._completed_logins += 1
            return success

    async def _login(self) -> bool:
        """
        Submit credentials with a fresh cookie jar

        The login runs on a short-lived client so its jar only ever holds
        cookies from the login exchange. That jar replaces the shared
        client's jar once the POST has completed, so responses to requests
        still in flight on the old session cannot leak into the new one.

        Returns:
            True if the response body carries the login success marker

        Raises:
            LoginError: If the login request could not be completed
        """
        form = {
            LOGIN_PARAM_USERNAME: self._username,
            LOGIN_PARAM_PASSWORD: self._password,
            LOGIN_PARAM_LOGIN: LOGIN_VALUE_LOGIN,
            LOGIN_PARAM_LOGIN_TYPE: LOGIN_VALUE_LOGIN_TYPE,
        }

        self.login_attempts += 1
        logger.debug(f"Logging in to {self.login_url} (attempt {self.login_attempts})")

        try:
            async with httpx.AsyncClient(timeout=self.client.timeout, follow_redirects=True) as login_client:
                response = await login_client.post(self.login_url, data=form)
                jar = httpx.Cookies(login_client.cookies)
        except httpx.HTTPError as e:
            raise LoginError(f"{type(e).__name__} while posting to {self.login_url}") from e

        # Replace rather than clear so stale cookies never mix with the new session
        self.client.cookies = jar

        if LOGIN_SUCCESS_MARKER not in response.text:
            logger.debug(
                f"Upstream login rejected (HTTP {response.status_code}, success marker not found)"
            )
            return False

        return True

    def status(self) -> dict:
        """Session summary for health reporting; never includes credentials."""
        now = self._clock()
        since_login = None
        if self._last_authenticated_at is not None:
            since_login = round(now - self._last_authenticated_at, 1)
        return {
            "state": self.current_state(now).value,
            "seconds_since_login": since_login,
            "validity_window_sec": self._validity_window_sec,
            "login_attempts": self.login_attempts,
        }
