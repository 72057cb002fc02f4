"""
Image helpers: data URL decoding for the classifier and public URLs for sample images.
"""

from typing import Optional
import base64
import binascii
import logging
import re

from app.core.settings import settings
from app.services.classifier.base import InlineImage

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)


def decode_data_url(data_url: Optional[str]) -> Optional[InlineImage]:
    """
    Decode "data:<mime>;base64,<payload>" into an InlineImage.

    Returns None for missing or malformed input; the photo is optional for classification.
    """
    if not data_url:
        return None

    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        logger.warning("Ignoring image: not a base64 data URL")
        return None

    mime_type, payload = match.group(1), match.group(2)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Ignoring image: invalid base64 payload ({e})")
        return None

    if not data:
        return None
    return InlineImage(mime_type=mime_type, data=data)


def public_image_url(relative_path: str) -> str:
    """Prefix a sample image path with PUBLIC_BASE_URL when one is configured."""
    base = (settings.PUBLIC_BASE_URL or "").rstrip("/")
    if not base:
        return relative_path
    return f"{base}{relative_path}"
