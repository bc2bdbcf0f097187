"""
Client for the external identity provider.

The broker never hashes passwords, issues tokens or verifies them itself.
It forwards credentials and tokens to the provider through the
:class:`IdentityProvider` interface; :class:`SupabaseIdentityProvider` talks
to Supabase Auth (GoTrue) over its REST API.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class ProviderUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class ProviderSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    user: Optional[ProviderUser] = None


class AuthResult(BaseModel):
    """Outcome of sign-up / sign-in. ``session`` is None when email confirmation is pending."""

    user: Optional[ProviderUser] = None
    session: Optional[ProviderSession] = None


class ProviderError(Exception):
    """The provider answered and refused the request (bad credentials, duplicate email, expired token...)."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ProviderUnavailable(Exception):
    """The provider could not be reached, timed out, or failed internally."""


class IdentityProvider(ABC):
    @abstractmethod
    async def sign_up(
        self, email: str, password: str, metadata: Dict[str, Any]
    ) -> AuthResult: ...

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> AuthResult: ...

    @abstractmethod
    async def sign_out(self, access_token: str) -> None: ...

    @abstractmethod
    async def get_user(self, access_token: str) -> ProviderUser: ...

    @abstractmethod
    async def refresh_session(self, refresh_token: str) -> AuthResult: ...

    async def aclose(self) -> None:
        return None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if not isinstance(body, dict):
        return f"HTTP {response.status_code}"
    for key in ("msg", "error_description", "message", "error"):
        if body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


def _parse_auth_payload(payload: Dict[str, Any]) -> AuthResult:
    try:
        return _auth_result(payload)
    except ValidationError as e:
        logger.error("Identity provider returned an unexpected auth payload")
        raise ProviderUnavailable("Identity provider returned an unexpected payload") from e


def _auth_result(payload: Dict[str, Any]) -> AuthResult:
    # GoTrue returns a session object when a session is issued, and the bare
    # user object when sign-up still needs email confirmation.
    if payload.get("access_token"):
        session = ProviderSession.model_validate(payload)
        return AuthResult(user=session.user, session=session)
    if "user" in payload and isinstance(payload["user"], dict):
        return AuthResult(user=ProviderUser.model_validate(payload["user"]))
    if payload.get("id"):
        return AuthResult(user=ProviderUser.model_validate(payload))
    return AuthResult()


class SupabaseIdentityProvider(IdentityProvider):
    """Supabase Auth over a single shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"apikey": api_key, "Content-Type": "application/json"},
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        bearer: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {bearer or self.api_key}"}
        try:
            response = await self._client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.error(f"Identity provider timed out on {method} {path}")
            raise ProviderUnavailable("Identity provider timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Identity provider request failed on {method} {path}: {e}")
            raise ProviderUnavailable("Identity provider unreachable") from e

        if response.status_code >= 500:
            logger.error(
                f"Identity provider returned HTTP {response.status_code} on {method} {path}"
            )
            raise ProviderUnavailable(f"Identity provider error (HTTP {response.status_code})")
        if response.status_code >= 400:
            raise ProviderError(_error_message(response), response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderUnavailable("Identity provider returned malformed JSON") from e
        if not isinstance(body, dict):
            raise ProviderUnavailable("Identity provider returned an unexpected payload")
        return body

    async def sign_up(self, email, password, metadata):
        response = await self._request(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": metadata},
        )
        return _parse_auth_payload(self._json(response))

    async def sign_in_with_password(self, email, password):
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return _parse_auth_payload(self._json(response))

    async def refresh_session(self, refresh_token):
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return _parse_auth_payload(self._json(response))

    async def sign_out(self, access_token):
        await self._request("POST", "/logout", bearer=access_token)

    async def get_user(self, access_token):
        response = await self._request("GET", "/user", bearer=access_token)
        body = self._json(response)
        if not body.get("id"):
            raise ProviderError("User not found", response.status_code)
        try:
            return ProviderUser.model_validate(body)
        except ValidationError as e:
            logger.error("Identity provider returned an unexpected user payload")
            raise ProviderUnavailable("Identity provider returned an unexpected payload") from e

    async def aclose(self) -> None:
        await self._client.aclose()
