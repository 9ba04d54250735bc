"""Shared pieces of the client trackers."""
from typing import Callable, Generic, TypeVar

import httpx

from app.config import DEFAULT_PORT

T = TypeVar("T")


def api_base_url(host: str = "localhost", port: int = DEFAULT_PORT) -> str:
    return f"http://{host}:{port}/api"


def error_message(exc: Exception, default: str = "Request failed") -> str:
    """Prefer the server's ``{"error": ...}`` body; fall back to the exception text."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            message = exc.response.json().get("error")
        except (ValueError, AttributeError):
            message = None
        if message:
            return message
    return str(exc) or default


class Publisher(Generic[T]):
    """Synchronous fan-out of values to subscribed listeners."""

    def __init__(self):
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, value: T) -> None:
        for listener in list(self._listeners):
            listener(value)
