"""Conversion tracker: asks the server to compress an uploaded video."""
import logging
from dataclasses import replace
from typing import Callable

import httpx

from app.client.base import Publisher, error_message
from app.client.models import ConversionState, ConversionStatus

logger = logging.getLogger("lanshare.client.conversions")


class ConversionTracker:
    """Publishes ConversionState snapshots; keeps the latest one per filename.

    The server gives no progress while HandBrake runs, so a state sits at
    ``converting`` with progress 0 until the response arrives.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client
        self._publisher: Publisher[ConversionState] = Publisher()
        self.states: dict[str, ConversionState] = {}

    def subscribe(self, listener: Callable[[ConversionState], None]) -> Callable[[], None]:
        return self._publisher.subscribe(listener)

    def _emit(self, state: ConversionState) -> None:
        self.states[state.filename] = state
        self._publisher.publish(replace(state))

    async def convert(self, filename: str, original_size: int) -> ConversionState:
        state = ConversionState(filename=filename, original_size=original_size)
        self._emit(state)
        state = replace(state, status=ConversionStatus.CONVERTING)
        self._emit(state)

        try:
            # no timeout: the response only comes back once the conversion finishes
            response = await self._client.post("/convert-video", json={"filename": filename}, timeout=None)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Video conversion error for %s: %s", filename, e)
            state = replace(
                state,
                status=ConversionStatus.ERROR,
                error=error_message(e, "Video conversion failed"),
            )
        else:
            state = replace(
                state,
                status=ConversionStatus.COMPLETED,
                progress=100,
                compressed_size=body.get("compressedSize"),
            )
        self._emit(state)
        return state
