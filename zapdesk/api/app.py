from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from ..core.errors import ZapdeskError
from ..core.logging import configure_logger
from ..core.settings import settings
from .router import Engine, router


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.engine = Engine()
    try:
        yield
    finally:
        await app.state.engine.aclose()


def create_app() -> FastAPI:
    configure_logger()
    app = FastAPI(
        title="Zapdesk REST API",
        description="Lightning address invoices for support agents",
        version=settings.version,
        license_info={
            "name": "MIT License",
        },
        lifespan=lifespan,
    )
    # the widget is embedded in the help center of another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(ZapdeskError)
    async def zapdesk_error_handler(request: Request, exc: ZapdeskError):
        logger.warning(f"{request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.detail, "code": exc.code},
        )

    app.include_router(router=router)
    return app


app = create_app()
