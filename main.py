from contextlib import asynccontextmanager
from logging.config import dictConfig
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from routers import api_router
from config import settings
from state import RelayState
from services.liveness import LivenessMonitor
from services.keepalive import KeepalivePinger
import logging
import uvicorn

dictConfig({
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "": {"handlers": ["console"], "level": settings.LOG_LEVEL},
        "uvicorn": {"handlers": ["console"], "level": settings.LOG_LEVEL, "propagate": False},
        "uvicorn.error": {"handlers": ["console"], "level": settings.LOG_LEVEL, "propagate": False},
        "uvicorn.access": {"handlers": ["console"], "level": settings.LOG_LEVEL, "propagate": False},
    },
})

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    relay: RelayState = app.state.relay
    monitor = LivenessMonitor(relay.registry, interval=settings.HEARTBEAT_INTERVAL_SECONDS)
    monitor.start()
    pinger = None
    if settings.KEEPALIVE_URL:
        pinger = KeepalivePinger(settings.KEEPALIVE_URL, interval=settings.KEEPALIVE_INTERVAL_SECONDS)
        pinger.start()
    logger.info("Server running on port %s", settings.PORT)
    try:
        yield
    finally:
        await monitor.stop()
        if pinger:
            await pinger.stop()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.relay = RelayState()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "WebSocket server is running"

    app.include_router(api_router)
    return app


app = create_app()


def server_config() -> uvicorn.Config:
    # uvicorn sends native ping control frames on every websocket and closes ones that stop answering
    return uvicorn.Config(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        ws="websockets",
        ws_ping_interval=settings.HEARTBEAT_INTERVAL_SECONDS,
        ws_ping_timeout=settings.WS_PING_TIMEOUT_SECONDS,
    )


if __name__ == "__main__":
    uvicorn.Server(server_config()).run()
