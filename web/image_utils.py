"""Image processing for product photos and logos uploaded in the editor.

Uploaded images are stored inline as data URLs, so they are normalized and
shrunk before they reach the store.
"""

import base64
import binascii
from io import BytesIO
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from shop.logging_config import get_logger

from .config import MAX_IMAGE_DIMENSION, MAX_IMAGE_SIZE

__all__ = ["process_product_image", "decode_image_payload"]

logger = get_logger("web.image_utils")


def decode_image_payload(payload: Union[bytes, str, None]) -> Optional[bytes]:
    """Return raw bytes from bytes, a base64 string or a data URL.

    Returns None for empty or undecodable input.
    """
    if payload is None:
        return None
    if isinstance(payload, bytes):
        return payload or None
    if not isinstance(payload, str):
        return None

    clean = payload.strip()
    if not clean:
        return None
    # Format: data:image/jpeg;base64,/9j/4AAQ...
    if clean.startswith("data:"):
        try:
            _, clean = clean.split(",", 1)
        except ValueError:
            return None
    try:
        return base64.b64decode(clean, validate=True)
    except (binascii.Error, ValueError):
        return None


def process_product_image(payload: Union[bytes, str, None]) -> Tuple[Optional[str], Optional[str]]:
    """Validate, downsize and re-encode an uploaded image.

    Args:
        payload: Raw file bytes, base64 text or a data URL.

    Returns:
        Tuple of (data_url, error_message):
        - success: ("data:image/jpeg;base64,...", None)
        - failure: (None, "message for the editor")
    """
    raw = decode_image_payload(payload)
    if raw is None:
        return None, "No se ha recibido ninguna imagen válida."

    if len(raw) > MAX_IMAGE_SIZE:
        size_mb = len(raw) / (1024 * 1024)
        limit_mb = MAX_IMAGE_SIZE / (1024 * 1024)
        return None, f"Imagen demasiado grande ({size_mb:.1f}MB). Máximo {limit_mb:.0f}MB."

    try:
        img = Image.open(BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        logger.info(f"Rejected upload that is not an image: {e}")
        return None, "El archivo no es una imagen válida."

    # Flatten transparency onto white; JPEG has no alpha
    if img.mode in ("RGBA", "LA", "P"):
        if img.mode == "P":
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")

    img.thumbnail((MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION))

    output = BytesIO()
    img.save(output, format="JPEG", quality=85, optimize=True)
    encoded = base64.b64encode(output.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}", None
