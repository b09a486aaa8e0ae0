"""Root sign-in against the application's auth endpoint.

The reset runs as a fixed root identity.  The returned bearer token is handed
to the seeders and, ultimately, back to the test harness.
"""

from __future__ import annotations

import httpx
from loguru import logger
from pydantic import SecretStr

from shardreset.reset.errors import AuthFailure


class RootAuthenticator:
    """Signs in the root user with an injected ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient, url: str, email: str, password: SecretStr) -> None:
        self._client = client
        self._url = url
        self._email = email
        self._password = password

    async def sign_in(self) -> str:
        """Return a session token.  Raises ``AuthFailure`` on any problem."""
        payload = {"email": self._email, "password": self._password.get_secret_value()}
        try:
            response = await self._client.post(self._url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"Root sign-in rejected ({exc.response.status_code}) for {self._email}"
            raise AuthFailure(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Auth service unreachable at {self._url}: {exc}"
            raise AuthFailure(msg) from exc

        try:
            data = response.json()
        except ValueError:
            data = None
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            msg = f"Auth response from {self._url} carried no token"
            raise AuthFailure(msg)

        logger.debug("Auth: signed in as {}", self._email)
        return token
