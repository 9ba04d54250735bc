"""Open a storage directory in the host's file manager."""
import logging
import os
import subprocess
import sys
from pathlib import Path

from app.exceptions import InternalError

logger = logging.getLogger("lanshare.folders")

OPEN_TIMEOUT = 15


def file_manager_command(path: Path) -> list[str]:
    if sys.platform == "darwin":
        return ["open", str(path)]
    return ["xdg-open", str(path)]


def open_in_file_manager(path: Path) -> None:
    try:
        if sys.platform.startswith("win"):
            os.startfile(str(path))  # type: ignore[attr-defined]
            return
        subprocess.run(
            file_manager_command(path),
            check=True,
            capture_output=True,
            timeout=OPEN_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.error("Error opening %s: %s", path, e)
        raise InternalError(f"Could not open {path}") from e
    logger.info("Opened %s in file manager", path)
