"""
URL-safe base64 without padding, as used in QR codes and share links.
"""

import base64
import binascii
import re

from transfer.errors import DecodeError

_VALID_BASE64 = re.compile(r'^[A-Za-z0-9+/]*={0,2}$')


def encode(data: bytes) -> str:
    """Encode bytes as URL-safe base64 with padding stripped."""
    text = base64.b64encode(data).decode('ascii')
    return text.replace('+', '-').replace('/', '_').replace('=', '')


def decode(text: str) -> bytes:
    """
    Decode URL-safe base64, restoring padding first.

    Args:
        text: Encoded text (padding optional)

    Returns:
        Decoded bytes

    Raises:
        DecodeError: On characters outside the alphabet or an impossible length
    """
    standard = text.replace('-', '+').replace('_', '/')
    standard += '=' * ((4 - len(standard) % 4) % 4)

    if not _VALID_BASE64.match(standard) or len(standard) % 4 != 0:
        raise DecodeError("Invalid base64 characters in payload")

    try:
        return base64.b64decode(standard, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Failed to decode base64 payload: {e}")
