from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

import uvicorn

from docbook.config.settings import settings
from docbook.core.errors import register_exception_handlers
from docbook.core.identity import SupabaseIdentityProvider

# -------------------------------------------------------------------------------------
# Logging
# -------------------------------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# request lines from httpx include URLs only, but keep them out of INFO logs
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_identity_provider() -> SupabaseIdentityProvider:
    return SupabaseIdentityProvider(
        base_url=settings.auth_base_url,
        api_key=settings.supabase_service_key,
        timeout=settings.provider_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application start-up & shutdown hooks."""
    logger.info("Application startup …")

    # tests install their own provider before startup
    if getattr(app.state, "identity_provider", None) is None:
        app.state.identity_provider = create_identity_provider()
        logger.info(f"Identity provider client ready ({settings.auth_base_url})")

    yield

    logger.info("Application shutdown …")
    provider = getattr(app.state, "identity_provider", None)
    if provider is not None:
        try:
            await provider.aclose()
            logger.info("Identity provider client closed")
        except Exception:
            logger.exception("Error closing identity provider client")
    app.state.identity_provider = None
    logger.info("Shutdown complete")


# -------------------------------------------------------------------------------------
# FastAPI application instance
# -------------------------------------------------------------------------------------
app = FastAPI(title="Doctor Booking API", lifespan=lifespan)

# CORS -------------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o) for o in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/")
async def root():
    return {"message": "Doctor Booking API Server"}


# ----------------------------------------------------------------- health‑check -----
@app.get("/health")
async def health_check():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ------------------------------------------------------------------- routes ---------
from docbook.routes.auth.router import router as auth_router  # noqa: E402  (after app creation)

app.include_router(auth_router)


if __name__ == "__main__":
    uvicorn.run("docbook.main:app", host="0.0.0.0", port=settings.port)
