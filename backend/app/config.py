"""Application configuration. Loads from environment and .env file."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then backend/.env, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")
load_dotenv(BASE_DIR.parent / ".env")

DESKTOP_DIR = Path.home() / "Desktop"
DEFAULT_UPLOAD_DIR = DESKTOP_DIR / "Uploads"
DEFAULT_CONVERTED_DIR = DESKTOP_DIR / "Converts"

DEFAULT_PORT = 3000
# Port the browser frontend is served on; its LAN origin is allowed by CORS
CLIENT_PORT = int(os.getenv("CLIENT_PORT", "4200"))

MAX_UPLOAD_SIZE_MB = 500


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name, "").strip()
    return Path(value).expanduser() if value else default


@dataclass(frozen=True)
class Settings:
    """Everything a server instance needs; passed explicitly into create_app()."""

    upload_dir: Path
    converted_dir: Path
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    max_upload_bytes: int = MAX_UPLOAD_SIZE_MB * 1024 * 1024
    handbrake_cli: str = "HandBrakeCLI"
    handbrake_preset: str = "Fast 1080p30"
    cors_origins: list[str] = field(default_factory=lambda: [f"http://localhost:{CLIENT_PORT}"])
    thumbnail_size: int = 320

    @classmethod
    def from_env(cls) -> "Settings":
        max_mb = int(os.getenv("MAX_UPLOAD_SIZE_MB", str(MAX_UPLOAD_SIZE_MB)))
        # CORS: comma-separated origins, e.g. "http://localhost:4200,http://127.0.0.1:4200"
        origins = [
            o.strip()
            for o in os.getenv("CORS_ORIGINS", f"http://localhost:{CLIENT_PORT}").split(",")
            if o.strip()
        ]
        return cls(
            upload_dir=_env_path("UPLOAD_DIR", DEFAULT_UPLOAD_DIR),
            converted_dir=_env_path("CONVERTED_DIR", DEFAULT_CONVERTED_DIR),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", str(DEFAULT_PORT))),
            max_upload_bytes=max_mb * 1024 * 1024,
            handbrake_cli=os.getenv("HANDBRAKE_CLI", "HandBrakeCLI"),
            handbrake_preset=os.getenv("HANDBRAKE_PRESET", "Fast 1080p30"),
            cors_origins=origins,
            thumbnail_size=int(os.getenv("THUMBNAIL_SIZE", "320")),
        )

    def ensure_directories(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.converted_dir.mkdir(parents=True, exist_ok=True)


# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("lanshare")
