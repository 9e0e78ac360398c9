# mutualpool/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from mutualpool.core.config import settings
from mutualpool.core.exceptions import LedgerException
from mutualpool.core.logging import get_logger

logger = get_logger(__name__)

# ===================
# Lifespan Management
# ===================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Pool owner: {settings.OWNER_ID}")
    yield
    from mutualpool.storage.ledger_store import get_ledger_store
    get_ledger_store().flush()
    logger.info("Shutting down...")

# ===================
# Application Setup
# ===================

app = FastAPI(
    title=settings.APP_NAME,
    description="Mutual-pool insurance ledger: premiums, claims and payouts",
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# ===================
# CORS Middleware
# ===================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===================
# Error Handling
# ===================

@app.exception_handler(LedgerException)
async def ledger_exception_handler(request: Request, exc: LedgerException):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

# ===================
# Include Routers
# ===================

from mutualpool.api.v1.policies import router as policies_router
from mutualpool.api.v1.claims import router as claims_router
from mutualpool.api.v1.pool import router as pool_router
from mutualpool.api.v1.admin import router as admin_router

app.include_router(policies_router, prefix=f"{settings.API_PREFIX}/v1/policies", tags=["policies"])
app.include_router(claims_router, prefix=f"{settings.API_PREFIX}/v1/claims", tags=["claims"])
app.include_router(pool_router, prefix=f"{settings.API_PREFIX}/v1/pool", tags=["pool"])
app.include_router(admin_router, prefix=f"{settings.API_PREFIX}/v1/admin", tags=["admin"])

# ===================
# Root Endpoints
# ===================

@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "policies": f"{settings.API_PREFIX}/v1/policies",
            "claims": f"{settings.API_PREFIX}/v1/claims",
            "pool": f"{settings.API_PREFIX}/v1/pool",
            "admin": f"{settings.API_PREFIX}/v1/admin"
        }
    }

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.APP_VERSION}
