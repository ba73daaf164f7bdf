"""Image re-encoding backed by Pillow."""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from .errors import TranscodeError

logger = logging.getLogger("mdx_localize")

# Pillow format names for the target formats we know how to write.
PIL_FORMATS = {
    "webp": "WEBP",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
}


def transcode_image(data: bytes, target_format: str = "webp", quality: int = 80) -> bytes:
    """Decode ``data`` and re-encode it as ``target_format`` at ``quality``.

    Animated input is rejected rather than flattened to its first frame.
    """
    pil_format = PIL_FORMATS.get(target_format.lower())
    if pil_format is None:
        raise TranscodeError(f"Unsupported target format: {target_format}")
    try:
        with Image.open(io.BytesIO(data)) as img:
            if getattr(img, "is_animated", False):
                raise TranscodeError(
                    f"Refusing to transcode animated {img.format} ({img.n_frames} frames)"
                )
            img.load()
            if pil_format == "JPEG" and img.mode in ("RGBA", "P", "LA"):
                background = Image.new("RGB", img.size, (255, 255, 255))
                if img.mode == "P":
                    img = img.convert("RGBA")
                background.paste(img, mask=img.split()[-1])
                img = background
            elif pil_format == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
                img = img.convert("RGB")
            elif pil_format != "JPEG" and img.mode not in ("RGB", "RGBA", "L", "LA"):
                img = img.convert("RGBA")

            out = io.BytesIO()
            save_kwargs = {"format": pil_format}
            if pil_format in ("JPEG", "WEBP"):
                save_kwargs["quality"] = int(quality)
            if pil_format == "PNG":
                save_kwargs["optimize"] = True
            img.save(out, **save_kwargs)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise TranscodeError(f"Could not transcode image to {target_format}: {exc}") from exc
    logger.debug("Transcoded %d bytes to %d bytes of %s", len(data), out.tell(), pil_format)
    return out.getvalue()
