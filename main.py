"""
Catalog Import Service: FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime

from config import settings, check_connection
from services.preview_cache_service import count_previews

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the catalog size at startup; imports need the product store."""
    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info(
            "catalog_store_connected",
            environment=settings.environment,
            products=db_status["products_count"],
            categories=db_status["categories_count"]
        )
    else:
        logger.error("catalog_store_unavailable", error=db_status.get("error"))

    yield


app = FastAPI(
    title="Catalog Import Service",
    description="Bulk product import and reconciliation for the store back-office",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """
    Import readiness.

    Degraded when the catalog store cannot be read, since preview and
    save both need it.
    """
    db_status = check_connection()
    healthy = db_status["status"] == "healthy"

    return {
        "status": "healthy" if healthy else "degraded",
        "catalog": {
            "products": db_status.get("products_count"),
            "categories": db_status.get("categories_count"),
            "error": db_status.get("error"),
        },
        "imports": {
            "max_rows": settings.import_max_rows,
            "preview_ttl_minutes": settings.preview_ttl_minutes,
            "cached_previews": count_previews(),
        },
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unhandled errors in the standard error envelope."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.utcnow().isoformat()
            }
        }
    )


from routes.catalog_import import router as catalog_import_router
from routes.products import router as products_router

# Bulk routes first so their static paths win over /{product_id}
app.include_router(catalog_import_router, prefix="/api/products", tags=["Catalog Import"])
app.include_router(products_router, prefix="/api/products", tags=["Products"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
