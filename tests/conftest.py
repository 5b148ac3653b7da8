"""Shared pytest fixtures for signpdf tests."""

from __future__ import annotations

import io
from collections.abc import Callable

import pikepdf
import pytest
from PIL import Image, ImageDraw

# Standard page sizes in points
A4_WIDTH, A4_HEIGHT = 595.28, 841.89
LETTER_WIDTH, LETTER_HEIGHT = 612.0, 792.0

# Captured signature size in pixels
SIG_WIDTH, SIG_HEIGHT = 200, 80


def _make_pdf(sizes: list[tuple[float, float]]) -> bytes:
    """Create a blank PDF with one page per (width, height)."""
    pdf = pikepdf.new()
    for size in sizes:
        pdf.add_blank_page(page_size=size)

    buf = io.BytesIO()
    pdf.save(buf)
    return buf.getvalue()


def _make_png(width: int, height: int, mode: str = "RGBA") -> bytes:
    """Create a PNG with a diagonal stroke on a transparent background."""
    background = (0, 0, 0, 0) if mode == "RGBA" else "white"
    img = Image.new(mode, (width, height), background)
    draw = ImageDraw.Draw(img)
    draw.line((0, height - 1, width - 1, 0), fill="black", width=3)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def image_xobjects(obj: pikepdf.Object) -> list[pikepdf.Object]:
    """Collect image XObjects reachable from a page or form's resources."""
    resources = obj.get("/Resources")
    if resources is None:
        return []
    xobjects = resources.get("/XObject")
    if xobjects is None:
        return []

    found: list[pikepdf.Object] = []
    for key in xobjects.keys():
        xobj = xobjects[key]
        subtype = xobj.get("/Subtype")
        if subtype == pikepdf.Name.Image:
            found.append(xobj)
        elif subtype == pikepdf.Name.Form:
            found.extend(image_xobjects(xobj))
    return found


@pytest.fixture
def make_pdf() -> Callable[[list[tuple[float, float]]], bytes]:
    return _make_pdf


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    return _make_png


@pytest.fixture
def letter_pdf() -> bytes:
    """Single-page US Letter PDF."""
    return _make_pdf([(LETTER_WIDTH, LETTER_HEIGHT)])


@pytest.fixture
def multipage_pdf() -> bytes:
    """Three-page A4 PDF."""
    return _make_pdf([(A4_WIDTH, A4_HEIGHT)] * 3)


@pytest.fixture
def mixed_size_pdf() -> bytes:
    """Two pages of different sizes: Letter then A4."""
    return _make_pdf([(LETTER_WIDTH, LETTER_HEIGHT), (A4_WIDTH, A4_HEIGHT)])


@pytest.fixture
def empty_pdf() -> bytes:
    """PDF with no pages."""
    return _make_pdf([])


@pytest.fixture
def signature_png() -> bytes:
    """200x80 transparent PNG signature."""
    return _make_png(SIG_WIDTH, SIG_HEIGHT)
