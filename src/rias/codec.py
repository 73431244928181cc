from __future__ import annotations

import io
from pathlib import Path
from typing import Sequence

from PIL import Image, ImageOps

from .core import CodecError


def _open_raster(raster: bytes) -> Image.Image:
    # Animated GIF/WEBP open on their first frame, which becomes the cover.
    with Image.open(io.BytesIO(raster)) as img:
        img = ImageOps.exif_transpose(img)
        return img.convert("RGBA")


def _rasterize_svg(path: Path, render_size: int) -> bytes:
    import cairosvg

    return cairosvg.svg2png(url=str(path), output_width=render_size)


def pad_to_square(img: Image.Image) -> Image.Image:
    """Center the image on a transparent square canvas as wide as its larger side."""
    rgba = img.convert("RGBA")
    w, h = rgba.size
    side = max(w, h)
    if w == h:
        return rgba
    out = Image.new("RGBA", (side, side), (255, 255, 255, 0))
    out.paste(rgba, ((side - w) // 2, (side - h) // 2))
    return out


class ImageCodec:
    """Turns a source image into the bytes of a multi-resolution ICO file."""

    def __init__(self, render_size: int = 1024) -> None:
        self.render_size = render_size

    def load(self, source: Path) -> Image.Image:
        source = Path(source)
        try:
            if source.suffix.lower() == ".svg":
                raster = _rasterize_svg(source, self.render_size)
            else:
                raster = source.read_bytes()
            return _open_raster(raster)
        except ImportError as e:
            raise CodecError(f"{source}: SVG sources need cairosvg installed") from e
        except Exception as e:
            # damaged files surface from Pillow as many exception types (SyntaxError for bad PNG chunks)
            raise CodecError(f"{source}: {e}") from e

    def render(self, source: Path, resolutions: Sequence[int]) -> bytes:
        img = pad_to_square(self.load(source))
        # Pillow drops ICO entries larger than the base image.
        largest = max(resolutions)
        if img.size[0] < largest:
            img = img.resize((largest, largest), Image.Resampling.LANCZOS)
        out = io.BytesIO()
        try:
            img.save(out, format="ICO", sizes=[(s, s) for s in resolutions])
        except Exception as e:
            raise CodecError(f"{source}: could not encode icon: {e}") from e
        return out.getvalue()
