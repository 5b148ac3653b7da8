"""Signature image decoding and overlay rendering using Pillow and ReportLab."""

from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from signpdf.exceptions import ImageDecodeError, StampError
from signpdf.placement import StampRect

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@dataclass(frozen=True)
class SignatureImage:
    """A decoded PNG signature with its native pixel size."""

    data: bytes
    width: int
    height: int

    def open(self) -> Image.Image:
        """Return a fresh Pillow image for the encoded data."""
        return Image.open(io.BytesIO(self.data))


def decode_signature(png_bytes: bytes) -> SignatureImage:
    """Validate PNG bytes and read their pixel dimensions.

    The image is fully decoded so truncated files are rejected here rather
    than halfway through rendering.

    Raises:
        ImageDecodeError: If the bytes are empty or not a complete PNG.
    """
    if not png_bytes:
        raise ImageDecodeError("Signature image is empty")
    if not png_bytes.startswith(PNG_MAGIC):
        raise ImageDecodeError("Signature image is not a PNG (bad magic number)")

    data = bytes(png_bytes)
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format != "PNG":
                raise ImageDecodeError(
                    f"Signature image is {img.format}, expected PNG"
                )
            img.load()
            width, height = img.size
    except (OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(f"Invalid PNG image: {e}") from e

    if width <= 0 or height <= 0:
        raise ImageDecodeError(f"Invalid image dimensions: {width}x{height}")
    return SignatureImage(data=data, width=width, height=height)


def generate_signature_overlay(
    page_width: float,
    page_height: float,
    signature: SignatureImage,
    rect: StampRect,
) -> bytes:
    """Generate a transparent single-page PDF with the signature drawn at *rect*.

    Args:
        page_width: Page width in points.
        page_height: Page height in points.
        signature: Decoded signature image.
        rect: Target rectangle in the page's coordinate system.

    Returns:
        PDF bytes of the overlay.

    Raises:
        StampError: If the page dimensions are invalid.
    """
    if page_width <= 0 or page_height <= 0:
        raise StampError(f"Invalid page dimensions: {page_width}x{page_height}")

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(page_width, page_height), invariant=1)
    with signature.open() as img:
        c.drawImage(
            ImageReader(img),
            rect.x,
            rect.y,
            width=rect.width,
            height=rect.height,
            mask="auto",
        )
        c.save()
    return buf.getvalue()
