"""
codec.py: Binary <-> text conversion for photo payloads.

Photos travel to the log service as standard base64 text. The decode side is
what the receiving service does with it.
"""

import base64
import binascii


def encode_b64(data: bytes) -> str:
    """Return standard base64 text (ASCII, no line breaks) for `data`."""
    return base64.b64encode(data).decode("ascii")


def decode_b64(text: str) -> bytes:
    """Inverse of encode_b64. Raises ValueError on malformed input."""
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as err:
        raise ValueError(f"Invalid base64 text: {err}") from err


def to_data_url(encoded_text: str, mime_type: str) -> str:
    """Wrap base64 text from encode_b64 in a data URL for `mime_type`."""
    return f"data:{mime_type};base64,{encoded_text}"
