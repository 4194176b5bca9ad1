"""
FastAPI application for OrderHub.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_config, APP_VERSION
from .core.logging import setup_logging_from_config
from .core.database import get_database
from .core.errors import NotFoundError, ValidationFailed, ConflictError
from .api.routes import health, customers, products, marketplaces, orders, stock, stats

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load config, set up logging and open the database; drain the sync pool on exit."""
    setup_logging_from_config(get_config())
    get_database()
    yield
    from .marketplaces.sync import get_stock_sync
    get_stock_sync().shutdown(wait=True)


app = FastAPI(
    title="OrderHub API",
    description="Orders, inventory and marketplace stock sync",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api")
app.include_router(customers.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(marketplaces.router, prefix="/api")
app.include_router(marketplaces.connections_router, prefix="/api")
app.include_router(orders.router, prefix="/api")
app.include_router(stock.router, prefix="/api")
app.include_router(stats.router, prefix="/api")


# ==================== Error Handlers ====================
# Every error body is {"message": ..., "errors": [{"path", "message"}]?}

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "path": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"]
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Validation error", "errors": errors})


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(status_code=400, content={"message": exc.message, "errors": exc.errors})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"message": f"{exc.entity} not found"})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"message": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "OrderHub API",
        "version": APP_VERSION,
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "orderhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
