import logging
from dataclasses import dataclass
from typing import Optional

from docbook.core.errors import (
    InvalidCredentials,
    InvalidToken,
    ProviderRejection,
    ServerError,
    Unauthenticated,
)
from docbook.core.identity import (
    IdentityProvider,
    ProviderError,
    ProviderSession,
    ProviderUnavailable,
)
from docbook.schemas.login_request import LoginRequest
from docbook.schemas.register_request import RegisterRequest
from docbook.schemas.shared import UserOut

logger = logging.getLogger(__name__)

CONFIRM_EMAIL_MESSAGE = "Registration successful. Please check your email to confirm your account."


@dataclass
class SessionOutcome:
    """What a broker operation hands back to the router: a user, and maybe tokens to set."""

    message: str
    user: Optional[UserOut] = None
    session: Optional[ProviderSession] = None


def _user_from_session(session: ProviderSession, fallback: Optional[UserOut] = None) -> UserOut:
    if session.user is not None:
        return UserOut.from_provider(session.user)
    if fallback is not None:
        return fallback
    raise ServerError()


async def register_user(provider: IdentityProvider, data: RegisterRequest) -> SessionOutcome:
    """Create the account with the provider, tagging it with name and role."""
    try:
        result = await provider.sign_up(data.email, data.password, data.metadata())
    except ProviderError as e:
        logger.info(f"Registration rejected for {data.email}: {e.message}")
        raise ProviderRejection(e.message) from e
    except ProviderUnavailable as e:
        logger.error(f"Registration failed for {data.email}: {e}")
        raise ServerError() from e

    if result.session is None:
        logger.info(f"Registration for {data.email} awaiting email confirmation")
        user = UserOut.from_provider(result.user) if result.user else None
        return SessionOutcome(message=CONFIRM_EMAIL_MESSAGE, user=user)

    user = _user_from_session(
        result.session,
        UserOut.from_provider(result.user) if result.user else None,
    )
    logger.info(f"Registered user {user.id} ({user.role.value})")
    return SessionOutcome(message="Registration successful", user=user, session=result.session)


async def login_user(provider: IdentityProvider, data: LoginRequest) -> SessionOutcome:
    """
    Verify the password with the provider.

    Unknown email, wrong password and "no session" all produce the same
    InvalidCredentials so callers cannot probe which accounts exist.
    """
    try:
        result = await provider.sign_in_with_password(data.email, data.password)
    except ProviderError as e:
        logger.info(f"Login rejected for {data.email}: {e.message}")
        raise InvalidCredentials() from e
    except ProviderUnavailable as e:
        logger.error(f"Login failed for {data.email}: {e}")
        raise ServerError() from e

    if result.session is None:
        logger.info(f"Login for {data.email} returned no session")
        raise InvalidCredentials()

    user = _user_from_session(
        result.session,
        UserOut.from_provider(result.user) if result.user else None,
    )
    logger.info(f"User {user.id} logged in")
    return SessionOutcome(message="Login successful", user=user, session=result.session)


async def logout_user(provider: IdentityProvider, access_token: Optional[str]) -> None:
    """Best-effort provider sign-out. Never raises."""
    if not access_token:
        return
    try:
        await provider.sign_out(access_token)
    except (ProviderError, ProviderUnavailable) as e:
        logger.warning(f"Provider sign-out failed, clearing cookies anyway: {e}")
    except Exception:
        logger.exception("Unexpected error during provider sign-out")


async def refresh_user_session(
    provider: IdentityProvider, refresh_token: Optional[str]
) -> SessionOutcome:
    """Trade the refresh token for a new token pair."""
    if not refresh_token:
        raise Unauthenticated("Missing refresh token. Please log in again.")
    try:
        result = await provider.refresh_session(refresh_token)
    except ProviderError as e:
        logger.info(f"Session refresh rejected: {e.message}")
        raise InvalidToken("Invalid or expired refresh token. Please log in again.") from e
    except ProviderUnavailable as e:
        logger.error(f"Session refresh failed: {e}")
        raise ServerError() from e

    if result.session is None:
        raise InvalidToken("Invalid or expired refresh token. Please log in again.")

    if result.session.user is not None:
        user = UserOut.from_provider(result.session.user)
    else:
        try:
            user = UserOut.from_provider(await provider.get_user(result.session.access_token))
        except (ProviderError, ProviderUnavailable) as e:
            logger.error(f"Could not load user for refreshed session: {e}")
            raise ServerError() from e
    return SessionOutcome(message="Session refreshed", user=user, session=result.session)
