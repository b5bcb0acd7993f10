import logging
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from earnapi import containers
from earnapi.config import settings
from earnapi.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from earnapi.core.exceptions import BaseAPIException
from earnapi.core.logging_middleware import LoggingMiddleware
from earnapi.logging_config import setup_logging
from earnapi.routers import (
    batch_router,
    commission_router,
    health_router,
    membership_router,
    salary_router,
    settings_router,
    task_router,
    wallet_router,
)

load_dotenv("earnapi/.env")
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG)
    app.container = containers.Container()  # type: ignore

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router.router)
    for module in (
        settings_router,
        membership_router,
        commission_router,
        salary_router,
        wallet_router,
        task_router,
        batch_router,
    ):
        app.include_router(module.router, prefix=settings.API_V1_STR)

    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    return app


app = create_app()

handler = Mangum(app)
