"""Unit tests for signature decoding and overlay rendering."""

from __future__ import annotations

import io

import pikepdf
import pytest
from PIL import Image

from signpdf.exceptions import ImageDecodeError, StampError
from signpdf.placement import StampRect
from signpdf.signature import (
    PNG_MAGIC,
    SignatureImage,
    decode_signature,
    generate_signature_overlay,
)

from .conftest import LETTER_HEIGHT, LETTER_WIDTH, SIG_HEIGHT, SIG_WIDTH, image_xobjects


class TestDecodeSignature:
    def test_reads_native_size(self, signature_png):
        sig = decode_signature(signature_png)
        assert (sig.width, sig.height) == (SIG_WIDTH, SIG_HEIGHT)
        assert sig.data == signature_png

    def test_opaque_png(self, make_png):
        sig = decode_signature(make_png(64, 32, mode="RGB"))
        assert (sig.width, sig.height) == (64, 32)

    def test_empty(self):
        with pytest.raises(ImageDecodeError, match="empty"):
            decode_signature(b"")

    def test_wrong_magic(self, signature_png):
        with pytest.raises(ImageDecodeError, match="magic"):
            decode_signature(b"GIF89a" + signature_png[6:])

    def test_jpeg_rejected(self):
        buf = io.BytesIO()
        Image.new("RGB", (10, 10), "white").save(buf, format="JPEG")
        with pytest.raises(ImageDecodeError):
            decode_signature(buf.getvalue())

    def test_truncated(self, signature_png):
        with pytest.raises(ImageDecodeError, match="Invalid PNG"):
            decode_signature(signature_png[: len(signature_png) // 2])

    def test_magic_only(self):
        with pytest.raises(ImageDecodeError):
            decode_signature(PNG_MAGIC)


class TestGenerateSignatureOverlay:
    def test_single_page_of_page_size(self, signature_png):
        sig = decode_signature(signature_png)
        overlay = generate_signature_overlay(
            LETTER_WIDTH, LETTER_HEIGHT, sig, StampRect(331, 356, 100, 40)
        )
        with pikepdf.open(io.BytesIO(overlay)) as pdf:
            assert len(pdf.pages) == 1
            box = pdf.pages[0].mediabox
            assert float(box[2]) == pytest.approx(LETTER_WIDTH)
            assert float(box[3]) == pytest.approx(LETTER_HEIGHT)

    def test_embeds_image_at_native_resolution(self, signature_png):
        sig = decode_signature(signature_png)
        overlay = generate_signature_overlay(
            LETTER_WIDTH, LETTER_HEIGHT, sig, StampRect(10, 10, 100, 40)
        )
        with pikepdf.open(io.BytesIO(overlay)) as pdf:
            images = image_xobjects(pdf.pages[0].obj)
            assert len(images) == 1
            assert int(images[0].Width) == SIG_WIDTH
            assert int(images[0].Height) == SIG_HEIGHT

    def test_invalid_page_size(self, signature_png):
        sig = SignatureImage(data=signature_png, width=SIG_WIDTH, height=SIG_HEIGHT)
        with pytest.raises(StampError, match="Invalid page dimensions"):
            generate_signature_overlay(0, 792, sig, StampRect(0, 0, 1, 1))
