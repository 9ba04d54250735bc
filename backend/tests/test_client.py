import pytest

from app.client import (
    ConversionStatus,
    ConversionTracker,
    UploadStatus,
    UploadTracker,
    api_base_url,
    format_file_size,
    recent_uploads,
)
from app.client.__main__ import UploadPrinter, parse_args
from app.client.models import UploadState
from app.client.uploads import progress_percent

pytestmark = pytest.mark.anyio


async def test_upload_tracker_completes_every_file(async_client, settings, tmp_path):
    first = tmp_path / "a.txt"
    first.write_bytes(b"0123456789")
    second = tmp_path / "clip.mp4"
    second.write_bytes(b"v" * 5000)

    tracker = UploadTracker(async_client)
    emitted = []
    tracker.subscribe(emitted.append)
    states = await tracker.upload_files([first, second])

    assert [s.status for s in states] == [UploadStatus.COMPLETED, UploadStatus.COMPLETED]
    assert all(s.progress == 100 for s in states)
    for local, state in zip([first, second], states):
        stored = settings.upload_dir / state.server_filename
        assert stored.read_bytes() == local.read_bytes()
        assert state.url == f"/uploads/{state.server_filename}"

    assert [s.status for s in emitted[0]] == [UploadStatus.PENDING, UploadStatus.PENDING]
    assert all(len(snapshot) == 2 for snapshot in emitted)
    assert any(s.status == UploadStatus.UPLOADING for snapshot in emitted for s in snapshot)
    assert [s.status for s in emitted[-1]] == [UploadStatus.COMPLETED, UploadStatus.COMPLETED]


async def test_upload_progress_never_goes_backwards(async_client, tmp_path):
    path = tmp_path / "big.bin"
    path.write_bytes(b"b" * 300_000)
    tracker = UploadTracker(async_client)
    seen = []
    tracker.subscribe(lambda states: seen.append(states[0].progress))
    await tracker.upload_files([path])
    assert seen == sorted(seen)
    assert seen[-1] == 100


async def test_emitted_snapshots_are_copies(async_client, tmp_path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"hello")
    tracker = UploadTracker(async_client)
    emitted = []
    tracker.subscribe(emitted.append)
    await tracker.upload_files([path])
    emitted[0][0].status = UploadStatus.ERROR
    assert tracker.states[0].status == UploadStatus.COMPLETED
    assert emitted[0][0] is not emitted[-1][0]


async def test_unsubscribe_stops_updates(async_client, tmp_path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"hello")
    tracker = UploadTracker(async_client)
    emitted = []
    unsubscribe = tracker.subscribe(emitted.append)
    unsubscribe()
    await tracker.upload_files([path])
    assert emitted == []


@pytest.mark.parametrize("settings", [{"max_upload_bytes": 100}], indirect=True)
async def test_rejected_upload_reports_server_error(async_client, settings, tmp_path):
    path = tmp_path / "big.bin"
    path.write_bytes(b"x" * 500)
    states = await UploadTracker(async_client).upload_files([path])
    assert states[0].status == UploadStatus.ERROR
    assert "too large" in states[0].error
    assert states[0].server_filename is None
    assert list(settings.upload_dir.iterdir()) == []


async def test_unreadable_local_file_is_an_error(async_client, tmp_path):
    ok = tmp_path / "ok.txt"
    ok.write_bytes(b"fine")
    states = await UploadTracker(async_client).upload_files([tmp_path / "missing.txt", ok])
    assert states[0].status == UploadStatus.ERROR
    assert states[0].error
    assert states[1].status == UploadStatus.COMPLETED


async def test_list_files_and_network_info(async_client, tmp_path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"0123456789")
    tracker = UploadTracker(async_client)
    await tracker.upload_files([path])
    files = await tracker.list_files()
    assert [f["size"] for f in files] == [10]
    info = await tracker.network_info()
    assert info["port"] == 3000
    assert info["uploadUrl"].endswith(":3000/api/upload")


async def test_conversion_tracker_success(async_client, handbrake, tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"v" * 100)
    uploaded = await UploadTracker(async_client).upload_files([path])
    name = uploaded[0].server_filename

    tracker = ConversionTracker(async_client)
    emitted = []
    tracker.subscribe(emitted.append)
    state = await tracker.convert(name, 100)

    assert [s.status for s in emitted] == [
        ConversionStatus.PENDING,
        ConversionStatus.CONVERTING,
        ConversionStatus.COMPLETED,
    ]
    assert state.progress == 100
    assert state.compressed_size == len(handbrake.output)
    assert state.compression_ratio == 60
    assert tracker.states[name] == state


async def test_conversion_tracker_not_found(async_client, handbrake):
    tracker = ConversionTracker(async_client)
    emitted = []
    tracker.subscribe(emitted.append)
    state = await tracker.convert("never-uploaded.mp4", 1234)
    assert [s.status for s in emitted] == [
        ConversionStatus.PENDING,
        ConversionStatus.CONVERTING,
        ConversionStatus.ERROR,
    ]
    assert state.error == "File not found"
    assert state.compressed_size is None
    assert state.original_size == 1234


async def test_retriggered_conversion_overwrites_state(async_client, handbrake, settings):
    (settings.upload_dir / "clip.mp4").write_bytes(b"v" * 100)
    tracker = ConversionTracker(async_client)
    handbrake.returncode = 1
    first = await tracker.convert("clip.mp4", 100)
    assert first.status == ConversionStatus.ERROR
    handbrake.returncode = 0
    second = await tracker.convert("clip.mp4", 100)
    assert list(tracker.states) == ["clip.mp4"]
    assert tracker.states["clip.mp4"] == second
    assert second.status == ConversionStatus.COMPLETED


def test_progress_percent():
    assert progress_percent(0, 200) == 0
    assert progress_percent(1, 200) == 0
    assert progress_percent(101, 200) == 50
    assert progress_percent(200, 200) == 100
    assert progress_percent(5, 0) == 100


def test_api_base_url():
    assert api_base_url() == "http://localhost:3000/api"
    assert api_base_url("192.168.1.20", 8080) == "http://192.168.1.20:8080/api"


def test_format_file_size():
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(500) == "500 Bytes"
    assert format_file_size(1024) == "1 KB"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(5 * 1024 * 1024) == "5 MB"
    assert format_file_size(3 * 1024**4) == "3072 GB"


def test_recent_uploads_newest_first():
    files = [
        {"name": "old", "uploadedAt": "2024-01-01T00:00:00+00:00"},
        {"name": "new", "uploadedAt": "2024-03-01T00:00:00+00:00"},
        {"name": "mid", "uploadedAt": "2024-02-01T00:00:00+00:00"},
        {"name": "broken"},
    ]
    assert [f["name"] for f in recent_uploads(files)] == ["new", "mid", "old", "broken"]
    assert [f["name"] for f in recent_uploads(files, limit=2)] == ["new", "mid"]


def test_cli_arguments():
    args = parse_args(["--server", "10.0.0.2", "upload", "a.mp4", "b.jpg", "--convert"])
    assert args.server == "10.0.0.2"
    assert args.port == 3000
    assert args.command == "upload"
    assert [p.name for p in args.paths] == ["a.mp4", "b.jpg"]
    assert args.convert


def test_upload_printer_skips_repeats(capsys, tmp_path):
    printer = UploadPrinter()
    state = UploadState(file=tmp_path / "a.txt", status=UploadStatus.UPLOADING, progress=41)
    printer([state])
    state.progress = 45
    printer([state])
    state.progress = 52
    printer([state])
    out = capsys.readouterr().out.splitlines()
    assert out == ["a.txt: uploading 41%", "a.txt: uploading 52%"]
