"""Video compression through HandBrakeCLI, run as a blocking subprocess."""
import logging
import shlex
import subprocess
from pathlib import Path

from app.conversion.models import ConversionResult, output_name_for
from app.exceptions import BadRequestError, ConversionFailedError
from app.storage import UploadStore

logger = logging.getLogger("lanshare.conversion")

FAILED_MESSAGE = "Video conversion failed"


class VideoCompressor:
    """Compresses one uploaded video per call.

    The call holds the caller until HandBrake exits. There is no queue and no
    cap: concurrent requests start concurrent subprocesses. A partial output
    left by a failed run stays in the output directory.
    """

    def __init__(
        self,
        store: UploadStore,
        output_dir: Path,
        handbrake_cli: str = "HandBrakeCLI",
        preset: str = "Fast 1080p30",
    ):
        self.store = store
        self.output_dir = output_dir
        self.handbrake_cli = handbrake_cli
        self.preset = preset
        logger.info("VideoCompressor initialized with %s (preset=%s)", handbrake_cli, preset)

    def build_command(self, src: Path, dest: Path) -> list[str]:
        return [
            self.handbrake_cli,
            "-i", str(src),
            "-o", str(dest),
            f"--preset={self.preset}",
            "--optimize",
        ]

    def compress(self, filename: str) -> ConversionResult:
        if not filename:
            raise BadRequestError("Filename is required")
        src = self.store.resolve(filename)
        out_name = output_name_for(filename)
        dest = self.output_dir / out_name

        cmd = self.build_command(src, dest)
        logger.info("Starting video conversion: %s", shlex.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.error("Could not run %s: %s. Install with: sudo apt install handbrake-cli", self.handbrake_cli, e)
            raise ConversionFailedError(FAILED_MESSAGE) from e
        if result.returncode != 0:
            logger.error(
                "HandBrake exited with %s for %s: %s",
                result.returncode,
                filename,
                (result.stderr or result.stdout or "").strip()[-2000:],
            )
            raise ConversionFailedError(FAILED_MESSAGE)

        try:
            original_size = src.stat().st_size
            compressed_size = dest.stat().st_size
        except OSError as e:
            logger.exception("Conversion output missing for %s: %s", filename, e)
            raise ConversionFailedError(FAILED_MESSAGE) from e

        conversion = ConversionResult(
            input_name=filename,
            output_name=out_name,
            original_size=original_size,
            compressed_size=compressed_size,
        )
        logger.info(
            "Video conversion completed: %s -> %s (%s -> %s bytes, %s%% smaller)",
            filename,
            out_name,
            original_size,
            compressed_size,
            conversion.ratio_percent,
        )
        return conversion
