"""
Error taxonomy for the auth broker.

Every failure leaves the API as ``{"error": <code>, "message": <text>}``.
Handlers are registered on the app by :func:`register_exception_handlers`.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BrokerError(Exception):
    status_code = 500
    code = "server_error"
    default_message = "Something went wrong. Please try again later."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class RequestInvalid(BrokerError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class ProviderRejection(BrokerError):
    status_code = 400
    code = "provider_rejection"
    default_message = "The request was rejected"


class InvalidCredentials(BrokerError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class Unauthenticated(BrokerError):
    status_code = 401
    code = "not_authenticated"
    default_message = "Not authenticated. Please log in to access this resource."


class InvalidToken(BrokerError):
    status_code = 401
    code = "invalid_token"
    default_message = "Invalid or expired token. Please log in again."


class InvalidTransition(BrokerError):
    status_code = 409
    code = "invalid_transition"
    default_message = "Invalid appointment status transition"


class ServerError(BrokerError):
    pass


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Turn the first pydantic error into a message naming the field."""
    errors = exc.errors()
    if not errors:
        return RequestInvalid.default_message

    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Request body must be valid JSON"
    # loc looks like ("body", "email"); a missing/invalid body is just ("body",)
    field_parts = [str(p) for p in first.get("loc", ()) if p != "body"]
    field = ".".join(field_parts)
    if not field:
        return "Request body must be a JSON object"

    if first.get("type") == "missing":
        return f"{field} is required"

    msg = first.get("msg", "is invalid")
    # pydantic prefixes custom validator messages with "Value error, "
    msg = msg.removeprefix("Value error, ")
    return f"{field}: {msg}"


async def broker_error_handler(request: Request, exc: BrokerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(
            f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}"
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report body validation problems as 400 instead of FastAPI's default 422."""
    message = _describe_validation_error(exc)
    logger.info(f"Validation error for {request.url.path}: {message}")
    return JSONResponse(
        status_code=RequestInvalid.status_code,
        content=RequestInvalid(message).to_dict(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=ServerError().to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BrokerError, broker_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
