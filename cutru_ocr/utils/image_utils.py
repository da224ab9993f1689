"""
Image intake helpers.

Validates uploaded household images and turns them into the base64 payload
the vision model expects.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image, UnidentifiedImageError

from ..exceptions import InputFileError

_EXTENSION_MIME = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


@dataclass(frozen=True)
class ImagePayload:
    """Base64 image data ready to embed in a data URL."""
    data_base64: str
    mime_type: str
    size_bytes: int

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_base64}"


def guess_mime_from_bytes(data: bytes, filename: str = "") -> Optional[str]:
    """Guess MIME type from the image header, falling back to the filename."""
    if data.startswith(b"\x89PNG"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"RIFF") and b"WEBP" in data[:12]:
        return "image/webp"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"

    if filename:
        return _EXTENSION_MIME.get(Path(filename).suffix.lower())
    return None


def pil_to_png_bytes(img: Image.Image) -> bytes:
    """Convert PIL Image to PNG bytes."""
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def encode_image_bytes(
    data: bytes,
    filename: str = "",
    allowed_mime_types: Sequence[str] = tuple(_EXTENSION_MIME.values()),
    max_size_bytes: Optional[int] = None,
) -> ImagePayload:
    """
    Validate raw image bytes and build the payload.

    Formats outside ``allowed_mime_types`` (BMP, TIFF, ...) are re-encoded to
    PNG when Pillow can read them.

    Raises:
        InputFileError: empty, oversized or unreadable image
    """
    if not data:
        raise InputFileError("Image file is empty", file_path=filename or None)
    if max_size_bytes is not None and len(data) > max_size_bytes:
        raise InputFileError(
            f"Image larger than {max_size_bytes // (1024 * 1024)}MB",
            file_path=filename or None,
            size_bytes=len(data),
        )

    mime = guess_mime_from_bytes(data, filename)
    if mime not in allowed_mime_types:
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                data = pil_to_png_bytes(img.convert("RGB"))
        except (UnidentifiedImageError, OSError) as e:
            raise InputFileError(f"Unsupported image format: {e}", file_path=filename or None)
        mime = "image/png"

    return ImagePayload(
        data_base64=base64.b64encode(data).decode("utf-8"),
        mime_type=mime,
        size_bytes=len(data),
    )


def load_image_payload(
    path: Path,
    allowed_mime_types: Sequence[str] = tuple(_EXTENSION_MIME.values()),
    max_size_bytes: Optional[int] = None,
) -> ImagePayload:
    """Read an image file from disk and build the payload."""
    path = Path(path)
    if not path.is_file():
        raise InputFileError("Image file not found", file_path=str(path))
    return encode_image_bytes(
        path.read_bytes(),
        filename=path.name,
        allowed_mime_types=allowed_mime_types,
        max_size_bytes=max_size_bytes,
    )
