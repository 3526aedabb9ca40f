"""Image utilities."""
import io
from pathlib import Path
from PIL import Image
from pillow_heif import register_heif_opener

register_heif_opener()

JPEG_MAGIC = b"\xff\xd8\xff"


def is_jpeg(content: bytes) -> bool:
    return content[:3] == JPEG_MAGIC


def prepare_jpeg(content: bytes, max_dim: int = 1920, quality: int = 95) -> bytes:
    """Re-encode non-JPEG images (PNG, HEIC, ...) as RGB JPEG.

    The server only decodes JPEG. JPEG input is returned untouched.
    """
    if is_jpeg(content):
        return content

    img = Image.open(io.BytesIO(content))

    if img.mode != "RGB":
        img = img.convert("RGB")

    if max(img.size) > max_dim:
        ratio = max_dim / max(img.size)
        img = img.resize((int(img.width * ratio), int(img.height * ratio)))

    out = io.BytesIO()
    img.save(out, format="JPEG", quality=quality)
    return out.getvalue()


def read_image(path: str | Path, convert: bool = False,
               max_dim: int = 1920, quality: int = 95) -> bytes:
    """Read an image file, optionally converting it to JPEG."""
    content = Path(path).read_bytes()
    if convert:
        return prepare_jpeg(content, max_dim=max_dim, quality=quality)
    return content
