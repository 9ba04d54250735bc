"""Gallery previews: scaled-down WebP thumbnails of uploaded images."""
import io
import logging
from pathlib import Path

from PIL import Image

from app.exceptions import BadRequestError

logger = logging.getLogger("lanshare.preview")

THUMBNAIL_QUALITY = 80


def resize_keep_aspect(img: Image.Image, max_side: int) -> Image.Image:
    """
    Scale image so its longer side is at most max_side, maintaining aspect ratio.
    Images already small enough are returned as an RGB copy.
    """
    w, h = img.size
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "transparency" in img.info else "RGB")
    scale = min(1.0, max_side / max(w, h))
    if scale >= 1.0:
        return img.copy()
    new_w = max(1, int(round(w * scale)))
    new_h = max(1, int(round(h * scale)))
    return img.resize((new_w, new_h), Image.Resampling.LANCZOS)


def make_thumbnail(path: Path, max_side: int) -> bytes:
    """WebP bytes of the image at path; non-images and unreadable images raise BadRequestError."""
    buf = io.BytesIO()
    try:
        with Image.open(path) as img:
            img.seek(0)
            thumb = resize_keep_aspect(img, max_side)
        thumb.save(buf, format="WEBP", quality=THUMBNAIL_QUALITY)
    # UnidentifiedImageError and truncated-data errors are both OSErrors
    except (OSError, Image.DecompressionBombError) as e:
        logger.info("No preview for %s: %s", path.name, e)
        raise BadRequestError("File is not an image") from e
    return buf.getvalue()
