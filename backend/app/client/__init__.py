from .base import api_base_url
from .conversions import ConversionTracker
from .formatting import format_file_size, recent_uploads
from .models import ConversionState, ConversionStatus, UploadState, UploadStatus
from .uploads import UploadTracker

__all__ = [
    "api_base_url",
    "ConversionTracker",
    "ConversionState",
    "ConversionStatus",
    "UploadTracker",
    "UploadState",
    "UploadStatus",
    "format_file_size",
    "recent_uploads",
]
