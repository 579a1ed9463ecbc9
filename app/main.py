import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.leaves.router import INTERNAL_ERROR_MESSAGE, router as leaves_router
from app.core.config import settings
from app.core.logging_config import configure_logging

log = logging.getLogger(__name__)


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": INTERNAL_ERROR_MESSAGE},
    )


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Leave Request Service")

    # CORS: the intake form and admin page are served from elsewhere
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, _unhandled_error)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    # Routers
    app.include_router(leaves_router)

    return app


app = create_app()
