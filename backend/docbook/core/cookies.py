from fastapi import Response

from docbook.config.settings import settings
from docbook.core.identity import ProviderSession

ACCESS_TOKEN_COOKIE = "access-token"
REFRESH_TOKEN_COOKIE = "refresh-token"


def _cookie_attrs() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict" if settings.is_production else "lax",
        "path": "/",
    }


def set_session_cookies(response: Response, session: ProviderSession) -> None:
    """Store the provider's token pair as HttpOnly cookies."""
    attrs = _cookie_attrs()
    max_age = settings.session_max_age_seconds
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE, value=session.access_token, max_age=max_age, **attrs
    )
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE, value=session.refresh_token, max_age=max_age, **attrs
    )


def clear_session_cookies(response: Response) -> None:
    attrs = _cookie_attrs()
    response.delete_cookie(key=ACCESS_TOKEN_COOKIE, **attrs)
    response.delete_cookie(key=REFRESH_TOKEN_COOKIE, **attrs)
