import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from farm_catalog.config import settings
from farm_catalog.core.errors import CatalogError, TransportFailure, ValidationFailure
from farm_catalog.core.i18n import Translator
from farm_catalog.logging_setup import setup_logging
from farm_catalog.middleware.actor_middleware import ActorMiddleware
from farm_catalog.api.routes import farms, preferences, build_catalog_routers, build_junction_routers

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Actor identification (JWT)
app.add_middleware(ActorMiddleware)


# ============ ERROR HANDLERS ============

def error_response(request: Request, error: CatalogError) -> JSONResponse:
    """{statusCode, error, message, ...} with the message in the request locale"""
    t = Translator(request.headers.get("Accept-Language"))
    content = {
        "statusCode": error.status_code,
        "error": error.error,
        "message": t(error.message_key, error.message_params()),
    }
    content.update(error.extra())
    return JSONResponse(status_code=error.status_code, content=content)


@app.exception_handler(CatalogError)
def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info("[API] %s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.detail)
    return error_response(request, exc)


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or None
    detail = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "invalid request"))
    return error_response(request, ValidationFailure(detail, field=field))


@app.exception_handler(SQLAlchemyError)
def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("[API] Database error on %s %s", request.method, request.url.path)
    return error_response(request, TransportFailure(str(exc.__class__.__name__)))


# Health check
@app.get("/health")
def health_check():
    """Health check for monitoring"""
    return {"status": "healthy"}


# ============ ROUTERS ============

for name, router in build_catalog_routers().items():
    app.include_router(router, prefix=f"{settings.API_V1_STR}/{name}", tags=[name])

for name, router in build_junction_routers().items():
    app.include_router(router, prefix=f"{settings.API_V1_STR}/{name}", tags=[name])

app.include_router(farms.router, prefix=f"{settings.API_V1_STR}/farms", tags=["farms"])
app.include_router(preferences.router, prefix=f"{settings.API_V1_STR}/farms")


@app.on_event("startup")
def startup_event():
    setup_logging(settings)
    logger.info("[STARTUP] %s started (environment: %s)", settings.PROJECT_NAME, settings.ENVIRONMENT)

    # Create the tables
    try:
        from farm_catalog.database import engine
        from farm_catalog.models import Base
        Base.metadata.create_all(bind=engine)
        logger.info("[STARTUP] Database tables created/verified")
    except SQLAlchemyError:
        logger.exception("[STARTUP] Could not create the database tables")


@app.on_event("shutdown")
def shutdown_event():
    logger.info("[SHUTDOWN] %s stopped", settings.PROJECT_NAME)
