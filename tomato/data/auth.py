"""Email/password sign-in against the Identity Toolkit REST API."""

import logging
from typing import Optional

import requests

from tomato.data.remote import Identity

__all__ = ["AuthClient", "AuthError", "DEFAULT_AUTH_URL"]

logger = logging.getLogger(__name__)

DEFAULT_AUTH_URL = "https://identitytoolkit.googleapis.com/v1"

# Service error codes shown to the user in plain words.
_ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "No account with this email",
    "INVALID_PASSWORD": "Wrong password",
    "INVALID_LOGIN_CREDENTIALS": "Wrong email or password",
    "EMAIL_EXISTS": "An account with this email already exists",
    "USER_DISABLED": "This account has been disabled",
}


class AuthError(Exception):
    """Sign-in or registration failed."""

    pass


class AuthClient:
    """Exchanges credentials for an Identity."""

    def __init__(
        self,
        api_key: str,
        auth_url: str = DEFAULT_AUTH_URL,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.auth_url = auth_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None

    def sign_in(self, email: str, password: str) -> Identity:
        return self._post("accounts:signInWithPassword", email, password)

    def sign_up(self, email: str, password: str) -> Identity:
        return self._post("accounts:signUp", email, password)

    def _post(self, endpoint: str, email: str, password: str) -> Identity:
        url = f"{self.auth_url}/{endpoint}"
        body = {"email": email, "password": password, "returnSecureToken": True}
        try:
            response = self._session.post(url, params={"key": self.api_key}, json=body, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise AuthError(f"Cannot reach sign-in service: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            code = ""
            error = data.get("error") if isinstance(data, dict) else None
            if isinstance(error, dict):
                code = str(error.get("message", ""))
            # Codes may carry a suffix, e.g. "WEAK_PASSWORD : Password should be ..."
            key = code.split(" : ")[0].strip()
            raise AuthError(_ERROR_MESSAGES.get(key, code or f"Sign-in failed ({response.status_code})"))

        try:
            identity = Identity(uid=data["localId"], token=data["idToken"], email=data.get("email", email))
        except (KeyError, TypeError) as e:
            raise AuthError("Unexpected response from sign-in service") from e
        logger.info(f"Signed in as {identity.email}")
        return identity

    def close(self) -> None:
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None
