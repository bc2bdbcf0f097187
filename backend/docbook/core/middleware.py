import logging

from fastapi import Depends, Request

from docbook.core.cookies import ACCESS_TOKEN_COOKIE
from docbook.core.errors import InvalidToken, ServerError, Unauthenticated
from docbook.core.identity import IdentityProvider, ProviderError, ProviderUnavailable
from docbook.schemas.shared import UserOut

logger = logging.getLogger(__name__)


def get_identity_provider(request: Request) -> IdentityProvider:
    """The shared identity-provider client created at startup."""
    provider = getattr(request.app.state, "identity_provider", None)
    if provider is None:
        logger.error("Identity provider requested before startup finished")
        raise ServerError()
    return provider


async def resolve_user(provider: IdentityProvider, token: str | None) -> UserOut:
    """Introspect an access token with the provider and normalize the user."""
    if not token:
        raise Unauthenticated()
    try:
        provider_user = await provider.get_user(token)
    except ProviderError as e:
        logger.info(f"Token introspection rejected: {e.message}")
        raise InvalidToken() from e
    except ProviderUnavailable as e:
        logger.error(f"Token introspection failed: {e}")
        raise ServerError() from e
    return UserOut.from_provider(provider_user)


async def get_current_user(
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
) -> UserOut:
    """
    Dependency for protected routes.

    Reads the access-token cookie and verifies it with the provider. On
    success the user is also placed on ``request.state.user``; on failure a
    401 is raised and the route body never runs.
    """
    user = await resolve_user(provider, request.cookies.get(ACCESS_TOKEN_COOKIE))
    request.state.user = user
    return user
