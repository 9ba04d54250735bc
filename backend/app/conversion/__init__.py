from .service import VideoCompressor
from .models import ConversionResult, compression_ratio, output_name_for

__all__ = ["VideoCompressor", "ConversionResult", "compression_ratio", "output_name_for"]
