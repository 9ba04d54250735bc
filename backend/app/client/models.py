"""Client-side upload/conversion state. Ephemeral; nothing here is persisted."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from app.conversion.models import compression_ratio


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


class ConversionStatus(str, Enum):
    PENDING = "pending"
    CONVERTING = "converting"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class UploadState:
    file: Path
    progress: int = 0  # percent, 0-100
    status: UploadStatus = UploadStatus.PENDING
    url: Optional[str] = None
    server_filename: Optional[str] = None
    error: Optional[str] = None

    @property
    def name(self) -> str:
        return self.file.name


@dataclass
class ConversionState:
    filename: str
    original_size: int  # bytes
    progress: int = 0
    status: ConversionStatus = ConversionStatus.PENDING
    compressed_size: Optional[int] = None
    error: Optional[str] = None

    @property
    def compression_ratio(self) -> Optional[int]:
        if self.compressed_size is None:
            return None
        return compression_ratio(self.original_size, self.compressed_size)
