import dataclasses
import subprocess
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app


class FakeHandBrake:
    """Stands in for subprocess.run: writes ``output`` to the -o path."""

    def __init__(self, output: bytes = b"c" * 40, returncode: int = 0, write_output: bool = True):
        self.output = output
        self.returncode = returncode
        self.write_output = write_output
        self.calls: list[list[str]] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        if self.write_output:
            Path(cmd[cmd.index("-o") + 1]).write_bytes(self.output)
        stderr = "" if self.returncode == 0 else "Encode failed"
        return subprocess.CompletedProcess(cmd, self.returncode, stdout="", stderr=stderr)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(request, tmp_path):
    """Test settings; parametrize indirectly with a dict to override fields."""
    defaults = Settings(
        upload_dir=tmp_path / "uploads",
        converted_dir=tmp_path / "converts",
        port=3000,
        thumbnail_size=64,
    )
    return dataclasses.replace(defaults, **getattr(request, "param", {}))


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
async def async_client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver/api") as c:
        yield c


@pytest.fixture
def handbrake(monkeypatch):
    fake = FakeHandBrake()
    monkeypatch.setattr("app.conversion.service.subprocess.run", fake)
    return fake


@pytest.fixture
def upload(client):
    def _upload(name: str, content: bytes, content_type: str = "application/octet-stream"):
        return client.post("/api/upload", files={"file": (name, content, content_type)})

    return _upload
