"""MatchLens API: match browsing views and per-match analysis views."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from matchlens.config import get_settings
from matchlens.routes.api import close_provider_client, router as api_router
from matchlens.routes.core import router as core_router
from matchlens.security import limiter

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting MatchLens...")
    if settings.manual_entry_mode:
        logger.warning("ODDS_API_KEY not set - manual entry mode enabled")
    logger.info(f"Collaborator base URL: {settings.PROVIDER_BASE_URL}")

    yield

    logger.info("Shutting down MatchLens...")
    await close_provider_client()


app = FastAPI(
    title="MatchLens",
    description="Match browsing and analysis views over odds and AI-analysis collaborators",
    version="1.0.0",
    lifespan=lifespan,
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Include routers
app.include_router(core_router)
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("matchlens.main:app", host="0.0.0.0", port=8000)
