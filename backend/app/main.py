"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from app.api.routes import root_router, router
from app.config import CLIENT_PORT, Settings, logger as config_logger
from app.conversion.models import PROCESSED_URL_PREFIX
from app.conversion.service import VideoCompressor
from app.exceptions import ShareError
from app.network import get_local_ip, server_urls
from app.storage import UPLOADS_URL_PREFIX, UploadStore

logging.getLogger("uvicorn").setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    urls = server_urls(settings.port)
    config_logger.info("LAN Upload Server started")
    config_logger.info("Local:    %s", urls["local"])
    config_logger.info("Network:  %s", urls["network"])
    config_logger.info("Upload endpoint: %s/api/upload", urls["network"])
    config_logger.info("Uploads dir: %s, converts dir: %s", settings.upload_dir, settings.converted_dir)
    config_logger.info("Video conversion needs HandBrake CLI (sudo apt install handbrake-cli)")
    yield
    config_logger.info("LAN Upload Server shutting down")


async def share_error_handler(request: Request, exc: ShareError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    config_logger.info("Invalid request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


async def unhandled_error_handler(request: Request, exc: Exception):
    config_logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    settings.ensure_directories()

    app = FastAPI(
        title="LAN Upload Server API",
        description="Upload files over the local network and compress videos with HandBrake.",
        version="1.0.0",
        lifespan=lifespan,
    )
    store = UploadStore(settings.upload_dir, settings.max_upload_bytes)
    app.state.settings = settings
    app.state.upload_store = store
    app.state.video_compressor = VideoCompressor(
        store,
        settings.converted_dir,
        handbrake_cli=settings.handbrake_cli,
        preset=settings.handbrake_preset,
    )

    origins = list(settings.cors_origins)
    lan_origin = f"http://{get_local_ip()}:{CLIENT_PORT}"
    if lan_origin not in origins:
        origins.append(lan_origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ShareError, share_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(router)
    app.include_router(root_router)
    app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")
    app.mount(PROCESSED_URL_PREFIX, StaticFiles(directory=settings.converted_dir), name="processed")
    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
