"""PDF stamper: composites a signature image onto document pages using pikepdf."""

from __future__ import annotations

import contextlib
import io
import logging
from collections.abc import Iterator
from dataclasses import dataclass

import pikepdf

from signpdf.exceptions import ParseError
from signpdf.placement import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SCALE,
    PlacementPolicy,
    StampRect,
    compute_rect,
    scaled_dimensions,
)
from signpdf.signature import decode_signature, generate_signature_overlay

logger = logging.getLogger(__name__)

_PDF_HEADER = b"%PDF-"
# Readers accept the header anywhere in the first 1024 bytes
_HEADER_SEARCH_LIMIT = 1024
_STAMP_PREFIX = "Sig"


def get_page_dimensions(page: pikepdf.Page) -> tuple[float, float]:
    """Return the (width, height) of a page's MediaBox in points."""
    box = page.mediabox
    width = float(box[2]) - float(box[0])
    height = float(box[3]) - float(box[1])
    return width, height


def _open_pdf(pdf_bytes: bytes) -> pikepdf.Pdf:
    """Open PDF bytes from a private copy.

    Raises:
        ParseError: If the bytes are empty, encrypted or not a PDF.
    """
    if not pdf_bytes:
        raise ParseError("Source document is empty")
    # qpdf would otherwise reconstruct a file with a damaged header
    if _PDF_HEADER not in bytes(pdf_bytes[:_HEADER_SEARCH_LIMIT]):
        raise ParseError("Source document has no PDF header")
    try:
        return pikepdf.open(io.BytesIO(bytes(pdf_bytes)))
    except pikepdf.PasswordError as e:
        raise ParseError(f"PDF is encrypted: {e}") from e
    except pikepdf.PdfError as e:
        raise ParseError(f"Invalid PDF: {e}") from e


def read_page_sizes(pdf_bytes: bytes) -> list[tuple[float, float]]:
    """Return (width, height) for every page of a PDF.

    Raises:
        ParseError: If the PDF cannot be read.
    """
    with _open_pdf(pdf_bytes) as pdf:
        return [get_page_dimensions(page) for page in pdf.pages]


def _target_pages(
    pdf: pikepdf.Pdf,
    policy: PlacementPolicy,
) -> Iterator[pikepdf.Page]:
    """Yield the pages that receive the stamp under *policy*."""
    if policy.appends_page:
        yield pdf.add_blank_page(page_size=DEFAULT_PAGE_SIZE)
        return
    yield from pdf.pages


def _draw_overlay(
    pdf: pikepdf.Pdf,
    page: pikepdf.Page,
    overlay: pikepdf.Page,
) -> None:
    """Draw *overlay* over *page* in the page's own user space.

    Unlike ``Page.add_overlay`` this applies no fit-to-page or /Rotate
    compensation, so the stamp keeps its exact size and position.
    """
    formx = pdf.copy_foreign(overlay.as_form_xobject())
    name = page.add_resource(formx, pikepdf.Name.XObject, prefix=_STAMP_PREFIX)
    # Isolate the existing content's graphics state from the stamp
    page.contents_add(b"q\n", prepend=True)
    page.contents_add(
        b"\nQ\nq 1 0 0 1 0 0 cm " + name.unparse() + b" Do Q\n",
        prepend=False,
    )


def stamp_pdf(
    source_pdf: bytes,
    signature_png: bytes,
    policy: PlacementPolicy = PlacementPolicy.APPEND_BLANK_PAGE,
    *,
    scale: float = DEFAULT_SCALE,
) -> bytes:
    """Composite a PNG signature onto the pages selected by *policy*.

    The inputs are never modified; a new PDF is returned. Existing page
    content is kept beneath the signature.

    Args:
        source_pdf: Bytes of the document to sign.
        signature_png: PNG bytes of the captured signature.
        policy: Which pages are stamped and where.
        scale: Factor applied to the image's native pixel size.

    Returns:
        Bytes of the stamped PDF.

    Raises:
        ParseError: If the source PDF cannot be parsed.
        ImageDecodeError: If the signature is not a valid PNG.
    """
    with contextlib.ExitStack() as stack:
        pdf = stack.enter_context(_open_pdf(source_pdf))
        signature = decode_signature(signature_png)
        stamp_width, stamp_height = scaled_dimensions(
            signature.width, signature.height, scale
        )
        logger.debug(
            "Signature %dx%dpx scaled to %.1fx%.1fpt (policy=%s)",
            signature.width,
            signature.height,
            stamp_width,
            stamp_height,
            policy.value,
        )

        try:
            stamped = 0
            for page in _target_pages(pdf, policy):
                page_width, page_height = get_page_dimensions(page)
                rect = compute_rect(
                    policy, page_width, page_height, stamp_width, stamp_height
                )
                overlay_pdf = generate_signature_overlay(
                    page_width, page_height, signature, rect
                )
                # Overlay sources must stay open until the document is saved
                overlay = stack.enter_context(pikepdf.open(io.BytesIO(overlay_pdf)))
                _draw_overlay(pdf, page, overlay.pages[0])
                stamped += 1

            if not stamped:
                logger.warning("Document has no pages; nothing was stamped")

            buf = io.BytesIO()
            pdf.save(buf, deterministic_id=True)
        except pikepdf.PdfError as e:
            raise ParseError(f"Failed to stamp PDF: {e}") from e

        logger.debug("Stamped %d page(s), %d bytes", stamped, buf.tell())
        return buf.getvalue()


@dataclass(frozen=True)
class PdfStamper:
    """Stamps signatures with a fixed placement policy and scale."""

    policy: PlacementPolicy = PlacementPolicy.APPEND_BLANK_PAGE
    scale: float = DEFAULT_SCALE

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError(f"Scale must be positive, got {self.scale}")

    def placement_for(
        self,
        page_width: float,
        page_height: float,
        image_width: int,
        image_height: int,
    ) -> StampRect:
        """Compute where a signature of the given pixel size lands on a page."""
        stamp_width, stamp_height = scaled_dimensions(
            image_width, image_height, self.scale
        )
        return compute_rect(
            self.policy, page_width, page_height, stamp_width, stamp_height
        )

    def stamp(self, source_pdf: bytes, signature_png: bytes) -> bytes:
        return stamp_pdf(source_pdf, signature_png, self.policy, scale=self.scale)
