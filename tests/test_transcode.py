# tests/test_transcode.py
from __future__ import annotations

import io

import pytest
from PIL import Image

from mdx_localize.errors import TranscodeError
from mdx_localize.transcode import transcode_image


def test_rgba_to_jpeg_flattens_alpha(png_bytes):
    out = transcode_image(png_bytes(10, 6, (0, 0, 0, 0)), "jpeg", 90)
    with Image.open(io.BytesIO(out)) as img:
        assert img.format == "JPEG"
        assert img.mode == "RGB"
        assert img.size == (10, 6)
        assert img.getpixel((5, 3))[0] > 240


def test_unknown_format_is_rejected(png_bytes):
    with pytest.raises(TranscodeError):
        transcode_image(png_bytes(), "tga", 80)


def test_garbage_input_is_rejected():
    with pytest.raises(TranscodeError):
        transcode_image(b"<svg></svg>", "webp", 80)


def _animated_gif() -> bytes:
    frames = [Image.new("RGB", (6, 6), color) for color in ((255, 0, 0), (0, 0, 255))]
    buf = io.BytesIO()
    frames[0].save(buf, format="GIF", save_all=True, append_images=frames[1:], duration=100, loop=0)
    return buf.getvalue()


def test_animated_input_is_rejected():
    with pytest.raises(TranscodeError, match="animated"):
        transcode_image(_animated_gif(), "webp", 80)


def test_single_frame_gif_is_transcoded():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (0, 255, 0)).save(buf, format="GIF")
    out = transcode_image(buf.getvalue(), "png", 80)
    with Image.open(io.BytesIO(out)) as img:
        assert img.format == "PNG"
        assert img.size == (4, 4)
