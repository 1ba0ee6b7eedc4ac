"""FastAPI application entry point: Middleware and router registration.

Configures Axiom request logging, CORS, the health check, and mounts the
manager surface at /api/v1/admin and the staff surface at /api/v1/app.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopshift.config import settings
from shopshift.middleware.axiom_logging import AxiomLoggingMiddleware

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Registered before CORS to capture all requests
app.add_middleware(AxiomLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------
from shopshift.api.admin import admin_router  # noqa: E402
from shopshift.api.app import app_router  # noqa: E402

app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(app_router, prefix="/api/v1/app")
