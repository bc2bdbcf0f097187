# tests/_stubs.py
from docbook.core.identity import (
    AuthResult,
    IdentityProvider,
    ProviderError,
    ProviderSession,
    ProviderUnavailable,
    ProviderUser,
)


def make_user(
    email="ann@example.com", name="Ann", role="patient", user_id="user-123"
) -> ProviderUser:
    return ProviderUser(id=user_id, email=email, user_metadata={"name": name, "role": role})


def make_session(user: ProviderUser | None = None, access="access-abc", refresh="refresh-xyz"):
    return ProviderSession(
        access_token=access,
        refresh_token=refresh,
        expires_in=3600,
        user=user or make_user(),
    )


class FakeIdentityProvider(IdentityProvider):
    """
    In-memory identity provider.

    Each operation returns whatever was scripted on the matching attribute;
    if that attribute holds an exception instance it is raised instead.
    Calls are recorded in ``calls`` as ``(operation, args)`` tuples.
    """

    def __init__(self):
        self.calls = []
        self.sign_up_result = AuthResult(user=make_user(), session=make_session())
        self.sign_in_result = AuthResult(user=make_user(), session=make_session())
        self.refresh_result = AuthResult(
            user=make_user(), session=make_session(access="access-new", refresh="refresh-new")
        )
        self.sign_out_result = None
        self.users_by_token = {"access-abc": make_user()}
        self.closed = False

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    @staticmethod
    def _resolve(result):
        if isinstance(result, Exception):
            raise result
        return result

    async def sign_up(self, email, password, metadata):
        self.calls.append(("sign_up", (email, password, metadata)))
        return self._resolve(self.sign_up_result)

    async def sign_in_with_password(self, email, password):
        self.calls.append(("sign_in_with_password", (email, password)))
        return self._resolve(self.sign_in_result)

    async def sign_out(self, access_token):
        self.calls.append(("sign_out", (access_token,)))
        return self._resolve(self.sign_out_result)

    async def get_user(self, access_token):
        self.calls.append(("get_user", (access_token,)))
        user = self.users_by_token.get(access_token)
        if user is None:
            raise ProviderError("invalid JWT: token is expired", 401)
        return self._resolve(user)

    async def refresh_session(self, refresh_token):
        self.calls.append(("refresh_session", (refresh_token,)))
        return self._resolve(self.refresh_result)

    async def aclose(self):
        self.closed = True


__all__ = [
    "FakeIdentityProvider",
    "ProviderError",
    "ProviderUnavailable",
    "make_session",
    "make_user",
]
