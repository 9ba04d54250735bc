"""Upload tracker: sends files to /api/upload and reports byte-level progress."""
import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import AsyncIterator, Callable, Iterable, Union

import httpx

from app.client.base import Publisher, error_message
from app.client.models import UploadState, UploadStatus

logger = logging.getLogger("lanshare.client.uploads")

ProgressCallback = Callable[[int, int], None]


class ProgressStream(httpx.AsyncByteStream):
    """Wraps a request body and reports (bytes_sent, bytes_total) per chunk."""

    def __init__(self, stream: httpx.AsyncByteStream, total: int, on_progress: ProgressCallback):
        self._stream = stream
        self._total = total
        self._on_progress = on_progress

    async def __aiter__(self) -> AsyncIterator[bytes]:
        sent = 0
        async for chunk in self._stream:
            sent += len(chunk)
            self._on_progress(sent, self._total)
            yield chunk

    async def aclose(self) -> None:
        await self._stream.aclose()


def progress_percent(sent: int, total: int) -> int:
    return min(100, round(100 * sent / (total or 1)))


class UploadTracker:
    """Tracks one UploadState per file of the latest upload_files() call.

    Every change publishes the whole list (as copies) to subscribers.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client
        self._publisher: Publisher[list[UploadState]] = Publisher()
        self.states: list[UploadState] = []

    def subscribe(self, listener: Callable[[list[UploadState]], None]) -> Callable[[], None]:
        return self._publisher.subscribe(listener)

    def snapshot(self) -> list[UploadState]:
        return [replace(s) for s in self.states]

    def _emit(self) -> None:
        self._publisher.publish(self.snapshot())

    async def upload_files(self, paths: Iterable[Union[str, Path]]) -> list[UploadState]:
        states = [UploadState(file=Path(p)) for p in paths]
        self.states = states
        self._emit()
        await asyncio.gather(*(self._upload_one(state) for state in states))
        return [replace(s) for s in states]

    async def _upload_one(self, state: UploadState) -> None:
        state.status = UploadStatus.UPLOADING
        self._emit()

        def on_progress(sent: int, total: int) -> None:
            percent = progress_percent(sent, total)
            if percent != state.progress:
                state.progress = percent
                self._emit()

        try:
            body = await self._send(state.file, on_progress)
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.error("Upload of %s failed: %s", state.name, e)
            state.status = UploadStatus.ERROR
            state.error = error_message(e, "Upload failed")
        else:
            state.status = UploadStatus.COMPLETED
            state.progress = 100
            state.url = body.get("url")
            state.server_filename = body.get("filename")
        self._emit()

    async def _send(self, path: Path, on_progress: ProgressCallback) -> dict:
        with path.open("rb") as fh:
            request = self._client.build_request(
                "POST",
                "/upload",
                files={"file": (path.name, fh)},
                timeout=None,
            )
            total = int(request.headers.get("Content-Length") or path.stat().st_size)
            request.stream = ProgressStream(request.stream, total, on_progress)
            response = await self._client.send(request)
        response.raise_for_status()
        return response.json()

    async def network_info(self) -> dict:
        response = await self._client.get("/network-info")
        response.raise_for_status()
        return response.json()

    async def list_files(self) -> list[dict]:
        response = await self._client.get("/files")
        response.raise_for_status()
        return response.json()

