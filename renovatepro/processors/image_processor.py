"""Image intake: normalize uploaded photos before they enter the wizard.

Supports: JPEG, PNG, WebP, HEIC/HEIF (iPhone).
Every upload is turned upright from its EXIF orientation, re-encoded as RGB
JPEG, capped in size, and returned as a data URL ready for the generation service and the export document.
"""
import io
import base64
from dataclasses import dataclass
from loguru import logger

from PIL import Image, ImageOps, UnidentifiedImageError

from renovatepro.config import get_settings

# Register HEIF opener if available
try:
    import pillow_heif
    pillow_heif.register_heif_opener()
    HEIF_SUPPORTED = True
except ImportError:
    HEIF_SUPPORTED = False
    logger.warning("pillow-heif not available, HEIC images will not be supported")

OUTPUT_MIME_TYPE = "image/jpeg"
JPEG_QUALITY = 88


@dataclass
class ProcessedImage:
    """Result of image normalization."""
    image_bytes: bytes
    base64_data: str
    format_original: str
    width: int
    height: int
    file_size_original: int
    file_size_output: int

    @property
    def data_url(self) -> str:
        return to_data_url(self.base64_data)


def to_data_url(base64_data: str, mime_type: str = OUTPUT_MIME_TYPE) -> str:
    return f"data:{mime_type};base64,{base64_data}"


def _detect_format(filename: str, file_bytes: bytes) -> str:
    """Detect image format from filename and magic bytes."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""

    if ext in ("heic", "heif"):
        return "HEIC"
    if ext == "webp":
        return "WEBP"
    if ext in ("jpg", "jpeg"):
        return "JPEG"
    if ext == "png":
        return "PNG"

    if file_bytes[:4] == b"\x89PNG":
        return "PNG"
    if file_bytes[:2] == b"\xff\xd8":
        return "JPEG"
    if file_bytes[:4] == b"RIFF" and file_bytes[8:12] == b"WEBP":
        return "WEBP"

    return "UNKNOWN"


def read_image_file(file_bytes: bytes, filename: str = "upload.jpg") -> ProcessedImage:
    """Normalize an uploaded photo.

    Args:
        file_bytes: Raw upload bytes.
        filename: Original filename (used for format detection).

    Returns:
        ProcessedImage with JPEG bytes, base64 payload and metadata.

    Raises:
        ValueError: empty, oversized or undecodable uploads.
    """
    settings = get_settings()
    original_size = len(file_bytes)

    if not file_bytes:
        raise ValueError("Empty upload")
    if original_size > settings.max_upload_size_mb * 1024 * 1024:
        raise ValueError(f"Image exceeds {settings.max_upload_size_mb}MB limit")

    original_format = _detect_format(filename, file_bytes)
    if original_format == "HEIC" and not HEIF_SUPPORTED:
        raise ValueError("HEIC format not supported, install pillow-heif")

    try:
        img = Image.open(io.BytesIO(file_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Unsupported image data in {filename}") from e

    # Bake the EXIF orientation into the pixels; the JPEG re-encode drops the tag
    img = ImageOps.exif_transpose(img)

    # Flatten transparency onto white for JPEG output
    if img.mode in ("RGBA", "P", "LA"):
        background = Image.new("RGB", img.size, (255, 255, 255))
        if img.mode == "P":
            img = img.convert("RGBA")
        background.paste(img, mask=img.split()[-1] if "A" in img.mode else None)
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")

    max_dim = settings.max_image_dimension
    w, h = img.size
    if max(w, h) > max_dim:
        ratio = max_dim / max(w, h)
        new_w = int(w * ratio)
        new_h = int(h * ratio)
        img = img.resize((new_w, new_h), Image.LANCZOS)
        logger.debug(f"Resized {w}x{h} → {new_w}x{new_h}")

    output = io.BytesIO()
    img.save(output, format="JPEG", quality=JPEG_QUALITY)
    output_bytes = output.getvalue()

    result = ProcessedImage(
        image_bytes=output_bytes,
        base64_data=base64.b64encode(output_bytes).decode("utf-8"),
        format_original=original_format,
        width=img.size[0],
        height=img.size[1],
        file_size_original=original_size,
        file_size_output=len(output_bytes),
    )

    logger.info(
        f"Image normalized: {filename} ({original_format} → JPEG, "
        f"{original_size // 1024}KB → {len(output_bytes) // 1024}KB, "
        f"{result.width}x{result.height})"
    )

    return result
