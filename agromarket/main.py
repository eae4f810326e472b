from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from agromarket.api.v1 import router as api_router
from agromarket.api import deps
from agromarket.core.config import Settings, settings as default_settings
from agromarket.core.database import init_db, dispose_db
from agromarket.core.errors import InternalFailure, MarketplaceError, NotAuthenticated
import logging

logger = logging.getLogger(__name__)


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    headers = None
    if isinstance(exc, NotAuthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "detail": "Invalid request", "errors": errors},
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}", exc_info=True)
    failure = InternalFailure()
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Gestiona el ciclo de vida de la aplicación.

        Startup: crea el engine y la fábrica de sesiones que reciben los endpoints.
        Shutdown: cierra las conexiones.
        """
        logger.info("Iniciando aplicación AgroMarket...")
        engine, session_factory = init_db(app_settings.DATABASE_URL)
        app.state.engine = engine
        app.state.session_factory = session_factory
        logger.info("Aplicación iniciada exitosamente")

        yield

        logger.info("Cerrando aplicación AgroMarket...")
        dispose_db(engine)

    app = FastAPI(
        title="AgroMarket API",
        description="FastAPI backend for the AgroMarket farmer marketplace",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    app.include_router(api_router.api_router, prefix="/api/v1")

    @app.get("/")
    def root():
        """
        Root endpoint
        """
        return {"message": "AgroMarket API", "version": "1.0.0"}

    @app.get("/health")
    def health_check(db: Session = Depends(deps.get_db)):
        """
        Health check endpoint
        """
        try:
            db.execute(text("SELECT 1"))
            db_status = "healthy"
        except SQLAlchemyError:
            db_status = "unhealthy"

        return {
            "status": db_status,
            "database": db_status,
            "environment": app_settings.ENVIRONMENT,
            "version": "1.0.0"
        }

    return app


logging.basicConfig(level=default_settings.LOG_LEVEL)

app = create_app()
