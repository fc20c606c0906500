import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from granian import Granian
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from signal_relay.api.errors import relay_error_handler
from signal_relay.api.v1.routers import broadcasters
from signal_relay.api.ws import signaling
from signal_relay.app_config import AppEnvironConfig, get_app_environ_config
from signal_relay.domain.signaling.registry import SessionRegistry
from signal_relay.domain.signaling.router import SignalingRouter
from signal_relay.shared.api import health
from signal_relay.shared.api.utils import api_failure, init_logger, validation_exception_handler
from signal_relay.utils.relay_errors import RelayError, RelayErrorCode

PROJECT_ROOT = Path(__file__).parent.parent


class HTTPLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore
        start_time = time.time()
        request_id = str(uuid.uuid4())[:8]

        logger.info(f"[{request_id}] {request.method} {request.url.path}")

        try:
            response = await call_next(request)

            process_time = (time.time() - start_time) * 1000

            logger.info(
                f"[{request_id}] {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Duration: {process_time:.2f}ms"
            )

            return response

        except Exception as exc:
            process_time = (time.time() - start_time) * 1000

            logger.error(
                f"[{request_id}] Unhandled exception in {request.method} {request.url.path} - "
                f"Duration: {process_time:.2f}ms - "
                f"Error: {type(exc).__name__}: {exc}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            failure = api_failure(
                errcode=RelayErrorCode.E_INTERNAL_ERROR,
                errmesg=f"Internal server error (request_id: {request_id})",
            )
            return ORJSONResponse(
                status_code=500,
                content=failure.model_dump(),
            )


def build_signaling_router(settings: AppEnvironConfig) -> SignalingRouter:
    registry = SessionRegistry(default_name=settings.DEFAULT_DISPLAY_NAME)
    return SignalingRouter(
        registry,
        mode=settings.BROADCAST_MODE,
        single_broadcaster_error=settings.SINGLE_BROADCASTER_ERROR,
    )


def resolve_static_dir(settings: AppEnvironConfig) -> Path:
    static_dir = Path(settings.STATIC_DIR)
    if not static_dir.is_absolute():
        static_dir = PROJECT_ROOT / static_dir
    return static_dir


@asynccontextmanager
async def lifespan(server: FastAPI):
    init_logger()

    logger.info("Application startup...")

    settings = get_app_environ_config()
    server.state.signaling_router = build_signaling_router(settings)
    logger.info(
        "Signaling ready: mode={} ws_path={}", settings.BROADCAST_MODE, settings.WS_PATH
    )

    yield

    logger.info("Application shutdown...")

    online = len(server.state.signaling_router.registry)
    if online:
        logger.info("Dropping {} live sessions", online)


app = FastAPI(
    version="1.0",
    title="Signal Relay",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

app.add_middleware(HTTPLoggingMiddleware)

app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore
app.add_exception_handler(RelayError, relay_error_handler)  # type: ignore

app.include_router(health.router)
app.include_router(broadcasters.router, prefix="/api/v1")
app.include_router(signaling.router)

_static_dir = resolve_static_dir(get_app_environ_config())
if _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=_static_dir, html=True), name="static")
else:
    logger.warning("Static directory {} not found, client bundle will not be served", _static_dir)


def build_granian_kwargs():
    settings = get_app_environ_config()
    kwargs = {
        "interface": "asgi",
        "address": settings.API_HOST,
        "port": settings.PORT,
        "workers": settings.API_WORKERS,
        "reload": settings.DEBUG,
    }

    return kwargs


if __name__ == "__main__":
    granian_kwargs = build_granian_kwargs()
    Granian("signal_relay.main:app", **granian_kwargs).serve()
