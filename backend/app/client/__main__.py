"""Command-line client for a LAN upload server.

    python -m app.client --server 192.168.1.20 upload clip.mp4 photo.jpg --convert
    python -m app.client --server 192.168.1.20 files
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import httpx

from app.client.base import api_base_url
from app.client.conversions import ConversionTracker
from app.client.formatting import format_file_size, recent_uploads
from app.client.models import ConversionState, UploadState, UploadStatus
from app.client.uploads import UploadTracker
from app.config import DEFAULT_PORT

VIDEO_SUFFIXES = {".mp4", ".mov", ".avi", ".mkv", ".m4v", ".webm"}


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upload files to a LAN upload server.")
    parser.add_argument("--server", default="localhost", help="Server host or IP address")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("info", help="Show the server's network address")
    files = sub.add_parser("files", help="List recent uploads")
    files.add_argument("--limit", type=int, default=10)
    upload = sub.add_parser("upload", help="Upload one or more files")
    upload.add_argument("paths", nargs="+", type=Path)
    upload.add_argument("--convert", action="store_true", help="Compress uploaded videos afterwards")
    convert = sub.add_parser("convert", help="Compress a video that is already uploaded")
    convert.add_argument("filename", help="Stored filename as shown by 'files'")
    convert.add_argument("--size", type=int, default=0, help="Original size in bytes, for the report")
    return parser.parse_args(argv)


class UploadPrinter:
    """Prints a line per file whenever its status or progress decile changes."""

    def __init__(self):
        self._last: dict[str, tuple] = {}

    def __call__(self, states: list[UploadState]) -> None:
        for state in states:
            key = (state.status, state.progress // 10)
            if self._last.get(state.name) == key:
                continue
            self._last[state.name] = key
            self._print(state)

    @staticmethod
    def _print(state: UploadState) -> None:
        line = f"{state.name}: {state.status.value} {state.progress}%"
        if state.error:
            line += f" ({state.error})"
        print(line)


def print_conversion(state: ConversionState) -> None:
    line = f"{state.filename}: {state.status.value}"
    if state.compressed_size is not None:
        line += f" {format_file_size(state.original_size)} -> {format_file_size(state.compressed_size)}"
        if state.original_size:
            line += f" ({state.compression_ratio}% smaller)"
    if state.error:
        line += f" ({state.error})"
    print(line)


async def run(args: argparse.Namespace) -> int:
    async with httpx.AsyncClient(base_url=api_base_url(args.server, args.port)) as client:
        uploads = UploadTracker(client)
        conversions = ConversionTracker(client)
        conversions.subscribe(print_conversion)

        if args.command == "info":
            info = await uploads.network_info()
            print(f"Upload URL: {info['uploadUrl']}")
            return 0

        if args.command == "files":
            for entry in recent_uploads(await uploads.list_files(), args.limit):
                print(f"{entry['name']}\t{format_file_size(entry['size'])}\t{entry['mimetype']}")
            return 0

        if args.command == "convert":
            state = await conversions.convert(args.filename, args.size)
            return 0 if state.error is None else 1

        uploads.subscribe(UploadPrinter())
        states = await uploads.upload_files(args.paths)
        failed = any(s.status == UploadStatus.ERROR for s in states)
        if args.convert:
            for state in states:
                if state.server_filename and state.file.suffix.lower() in VIDEO_SUFFIXES:
                    result = await conversions.convert(state.server_filename, state.file.stat().st_size)
                    failed = failed or result.error is not None
        return 1 if failed else 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except httpx.HTTPError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
