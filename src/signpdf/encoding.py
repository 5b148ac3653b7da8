"""Base64 and data-URI conversions for documents and signature images."""

from __future__ import annotations

import base64
import binascii

from signpdf.exceptions import ImageDecodeError, ParseError, StampError

PDF_MEDIA_TYPE = "application/pdf"
_DATA_URI_PREFIX = "data:"
_BASE64_MARKER = ";base64"


def encode_pdf(pdf_bytes: bytes, *, data_uri: bool = False) -> str:
    """Serialize PDF bytes as base64 text.

    With ``data_uri=True`` the text is a self-describing
    ``data:application/pdf;base64,...`` URI, otherwise bare base64.
    """
    encoded = base64.b64encode(pdf_bytes).decode("ascii")
    if data_uri:
        return f"{_DATA_URI_PREFIX}{PDF_MEDIA_TYPE}{_BASE64_MARKER},{encoded}"
    return encoded


def state_payload(result_file: str, *, data_uri: bool) -> str:
    """Return the text handed to the workflow for a serialized result.

    A data URI is split on its comma and only the base64 part is kept;
    raw base64 output is passed through unchanged.
    """
    if data_uri:
        return result_file.split(",")[1]
    return result_file


def _decode(
    text: str,
    error_cls: type[StampError],
    what: str,
) -> tuple[str | None, bytes]:
    """Decode base64 or a base64 data URI into (media_type, bytes)."""
    media_type = None
    payload = text.strip()
    if payload.startswith(_DATA_URI_PREFIX):
        header, sep, payload = payload.partition(",")
        if not sep or not header.endswith(_BASE64_MARKER):
            raise error_cls(f"{what} is not a base64 data URI")
        media_type = header[len(_DATA_URI_PREFIX) : -len(_BASE64_MARKER)] or None

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise error_cls(f"{what} is not valid base64: {e}") from e
    if not data:
        raise error_cls(f"{what} is empty")
    return media_type, data


def decode_document(text: str) -> bytes:
    """Decode a base64 (or data-URI) document field into PDF bytes.

    Raises:
        ParseError: If the text is not decodable.
    """
    media_type, data = _decode(text, ParseError, "Document")
    if media_type is not None and media_type != PDF_MEDIA_TYPE:
        raise ParseError(f"Document has media type {media_type}, expected PDF")
    return data


def decode_image_data_url(text: str) -> bytes:
    """Decode a canvas ``toDataURL``-style export into PNG bytes.

    Raises:
        ImageDecodeError: If the text is not decodable.
    """
    media_type, data = _decode(text, ImageDecodeError, "Signature image")
    if media_type is not None and media_type != "image/png":
        raise ImageDecodeError(
            f"Signature image has media type {media_type}, expected image/png"
        )
    return data
