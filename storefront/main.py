"""
Main FastAPI application
"""
import time
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.config import settings, validate_settings
from storefront.routers import auth, brands, cart, categories, diagnostics, discounts, orders, products, reviews, wishlist
from storefront.services.email_service import email_service
from storefront.services.seed_service import run_seed
from storefront.utils import responses
from storefront.utils.database import SessionLocal, create_tables, engine
from storefront.utils.dates import utcnow
from storefront.utils.errors import AppError
from storefront.utils.logger import setup_logging

API_PREFIX = "/api"

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="E-commerce storefront API: catalog, cart, checkout, discounts and reviews",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    line = f"{request.method} {request.url.path} {response.status_code} - {duration_ms:.0f}ms"
    if response.status_code >= 400:
        logger.warning(line)
    else:
        logger.info(line)
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return responses.error(exc.message, exc.status_code, exc.errors)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return responses.error("Validation failed", 422, errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return responses.error(f"Route {request.url.path} not found", 404)
    return responses.error(str(exc.detail), exc.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    extra = {}
    if settings.is_development:
        extra["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return responses.error("Internal Server Error", 500, **extra)


@app.on_event("startup")
async def startup_event():
    """Validate settings, create tables, probe email and seed the admin user"""
    setup_logging()
    validate_settings()

    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    logger.info("Database connected successfully")

    create_tables()
    email_service.check_connection()

    db = SessionLocal()
    try:
        run_seed(db)
    finally:
        db.close()

    logger.info(f"Server ready on port {settings.port} ({settings.environment})")


@app.get(f"{API_PREFIX}/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "success", "message": "API is running", "timestamp": utcnow().isoformat() + "Z"}


if not settings.is_production:
    app.include_router(diagnostics.router, prefix=API_PREFIX)

for module in (auth, categories, brands, products, cart, wishlist, orders, discounts, reviews):
    app.include_router(module.router, prefix=API_PREFIX)


def run():
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
