"""API routes for upload, listing and video compression."""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Request, Response, UploadFile

from app.config import Settings
from app.conversion.preview import make_thumbnail
from app.conversion.service import VideoCompressor
from app.exceptions import BadRequestError, InternalError
from app.folders import open_in_file_manager
from app.network import network_info, server_urls
from app.storage import UploadStore

logger = logging.getLogger("lanshare.api")
router = APIRouter(prefix="/api", tags=["lanshare"])
root_router = APIRouter(tags=["lanshare"])


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.upload_store


def get_video_compressor(request: Request) -> VideoCompressor:
    return request.app.state.video_compressor


@root_router.get("/")
def index(settings: Settings = Depends(get_settings)):
    return {
        "message": "LAN Upload Server",
        "uploadEndpoint": "/api/upload",
        "networkAccess": server_urls(settings.port)["network"],
        "status": "running",
    }


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/limits")
def get_limits(settings: Settings = Depends(get_settings)):
    """Return the upload size limit for the client."""
    return {
        "maxUploadBytes": settings.max_upload_bytes,
        "maxUploadMb": settings.max_upload_bytes // (1024 * 1024),
    }


@router.get("/network-info")
def get_network_info(settings: Settings = Depends(get_settings)):
    return network_info(settings.port)


@router.post("/upload")
async def upload_file(
    file: Optional[UploadFile] = File(None),
    store: UploadStore = Depends(get_upload_store),
):
    """Store a single file under a generated unique name. Any file type is accepted."""
    if file is None:
        raise BadRequestError("No file uploaded")
    logger.info("Uploading file: %s Type: %s", file.filename, file.content_type)
    uploaded = await store.save(file)
    return uploaded.to_dict()


@router.get("/files")
def list_files(store: UploadStore = Depends(get_upload_store)):
    """Uploaded files, unordered; the client sorts for display."""
    return [f.to_dict() for f in store.list_files()]


@router.get("/files/{name}/thumbnail")
def file_thumbnail(
    name: str,
    store: UploadStore = Depends(get_upload_store),
    settings: Settings = Depends(get_settings),
):
    path = store.resolve(name)
    data = make_thumbnail(path, settings.thumbnail_size)
    return Response(content=data, media_type="image/webp")


@router.post("/convert-video")
def convert_video(
    filename: Optional[str] = Body(None, embed=True),
    compressor: VideoCompressor = Depends(get_video_compressor),
):
    """Compress an uploaded video with HandBrake. Holds the request until the tool exits."""
    result = compressor.compress(filename or "")
    return result.to_dict()


def _open_folder(path, label: str) -> dict:
    try:
        open_in_file_manager(path)
    except InternalError as e:
        raise InternalError(f"Failed to open {label} folder") from e
    return {"success": True, "message": f"{label.capitalize()} folder opened"}


@router.post("/open-uploads-folder")
def open_uploads_folder(settings: Settings = Depends(get_settings)):
    return _open_folder(settings.upload_dir, "uploads")


@router.post("/open-converts-folder")
def open_converts_folder(settings: Settings = Depends(get_settings)):
    return _open_folder(settings.converted_dir, "converts")
