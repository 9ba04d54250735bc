"""Conversion result model."""
from dataclasses import dataclass
from urllib.parse import quote

from app.storage import upload_url

PROCESSED_URL_PREFIX = "/processed"
OUTPUT_PREFIX = "compressed-"


def output_name_for(filename: str) -> str:
    return f"{OUTPUT_PREFIX}{filename}"


def compression_ratio(original_size: int, compressed_size: int) -> int:
    """Percent saved, rounded; negative when the output grew."""
    if original_size <= 0:
        return 0
    return round(100 * (1 - compressed_size / original_size))


@dataclass(frozen=True)
class ConversionResult:
    """Derived from filesystem stats once the external tool exits; never persisted."""

    input_name: str
    output_name: str
    original_size: int  # bytes
    compressed_size: int  # bytes

    @property
    def ratio_percent(self) -> int:
        return compression_ratio(self.original_size, self.compressed_size)

    def to_dict(self) -> dict:
        return {
            "originalSize": self.original_size,
            "compressedSize": self.compressed_size,
            "originalFile": upload_url(self.input_name),
            "compressedFile": f"{PROCESSED_URL_PREFIX}/{quote(self.output_name)}",
            "compressionRatio": self.ratio_percent,
        }
