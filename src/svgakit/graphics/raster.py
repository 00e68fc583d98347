import asyncio
import io
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFilter, ImageFont

from svgakit.kernel.errors import InvalidRasterData
from svgakit.movie.keys import FALLBACK_PNG, decode_asset, encode_asset
from svgakit.movie.model import Asset

logger = logging.getLogger(__name__)

Size = tuple[int, int]
ColorStops = Sequence[tuple[float, str]]

TRANSPARENT = (0, 0, 0, 0)

# pale gold, bright white center
SILHOUETTE_STOPS: ColorStops = (
    (0.0, '#FFFFFF'),
    (0.2, '#FFE082'),
    (0.5, '#FFFFFF'),
    (0.8, '#FFE082'),
    (1.0, '#FFFFFF'),
)
BLOCK_STOPS: ColorStops = (
    (0.0, '#FFFFFF'),
    (0.3, '#FFF8E1'),
    (0.5, '#FFFFFF'),
    (0.7, '#FFF8E1'),
    (1.0, '#FFFFFF'),
)


@dataclass(frozen=True, slots=True)
class TextStyle:
    content: str = 'Your Text'
    size: int = 24
    color: str = '#ffffff'
    font_family: str = 'sans-serif'
    gradient: bool = False
    gradient_start: str = '#FFD700'
    gradient_end: str = '#FFA500'


def canvas_size(width: float, height: float) -> Size:
    return max(1, math.ceil(width)), max(1, math.ceil(height))


def to_png(im: Image.Image) -> bytes:
    with io.BytesIO() as stream:
        im.save(stream, format='PNG')
        return stream.getvalue()


def open_rgba(raster: bytes, what: str = 'raster') -> Image.Image | None:
    try:
        with Image.open(io.BytesIO(raster)) as im:
            return im.convert('RGBA')
    except (OSError, ValueError) as exc:
        logger.warning(
            InvalidRasterData(None, f'cannot decode {what} ({exc})'),
            extra={'repair': 'InvalidRasterData', 'key': None},
        )
        return None


def linear_gradient(
    size: Size,
    stops: ColorStops,
    direction: tuple[float, float],
) -> Image.Image:
    """Opaque linear gradient from the origin along ``direction``.

    ``stops`` are ``(offset, color)`` pairs with offsets in ``[0, 1]``, the
    same way a canvas gradient is described.
    """
    width, height = size
    dx, dy = direction
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    length = float(dx * dx + dy * dy) or 1.0
    pos = np.clip((xs * dx + ys * dy) / length, 0.0, 1.0)

    offsets = [offset for offset, _ in stops]
    colors = np.array(
        [ImageColor.getrgb(color)[:3] for _, color in stops],
        dtype=np.float64,
    )
    rgb = np.stack(
        [np.interp(pos, offsets, colors[:, channel]) for channel in range(3)],
        axis=-1,
    )
    alpha = np.full((height, width, 1), 255.0)
    pixels = np.concatenate([rgb, alpha], axis=-1).round().astype(np.uint8)
    return Image.fromarray(pixels)


def load_font(
    font_family: str,
    size: int,
) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype(font_family, size)
    except OSError:
        logger.debug(f'font {font_family!r} not found, using default font')
        return ImageFont.load_default(size)


def measure_text(text: str, size: int, font_family: str = 'sans-serif') -> Size:
    font = load_font(font_family, size)
    return math.ceil(font.getlength(text) + 4), math.ceil(size * 1.2)


def render_placeholder(width: float, height: float) -> bytes:
    return to_png(Image.new('RGBA', canvas_size(width, height), TRANSPARENT))


def render_shine_block(width: float, height: float) -> bytes:
    size = canvas_size(width, height)
    block = linear_gradient(size, BLOCK_STOPS, size)
    block.alpha_composite(block.filter(ImageFilter.GaussianBlur(4)))
    return to_png(block)


def render_shine_silhouette(raster: bytes, width: float, height: float) -> bytes:
    base = open_rgba(raster, 'shine source')
    if base is None:
        return FALLBACK_PNG
    size = canvas_size(width, height)
    tinted = linear_gradient(size, SILHOUETTE_STOPS, size)
    tinted.putalpha(base.resize(size, Image.Resampling.LANCZOS).getchannel('A'))
    return to_png(tinted.filter(ImageFilter.GaussianBlur(2)))


def _paste_centered(canvas: Image.Image, im: Image.Image, scale: float) -> Image.Image:
    if scale != 1:
        im = im.resize(
            (
                min(canvas.width, max(1, round(im.width * scale))),
                min(canvas.height, max(1, round(im.height * scale))),
            ),
            Image.Resampling.LANCZOS,
        )
    canvas.alpha_composite(
        im,
        dest=((canvas.width - im.width) // 2, (canvas.height - im.height) // 2),
    )
    return canvas


def render_text(style: TextStyle, width: float, height: float) -> bytes:
    size = canvas_size(width, height)
    font = load_font(style.font_family, style.size)
    left, top, right, bottom = font.getbbox(style.content)
    text_size = (
        max(1, math.ceil(right - left)),
        max(1, math.ceil(style.size * 1.2), math.ceil(bottom - top)),
    )

    mask = Image.new('L', text_size, 0)
    ImageDraw.Draw(mask).text(
        (
            (text_size[0] - (right - left)) / 2 - left,
            (text_size[1] - (bottom - top)) / 2 - top,
        ),
        style.content,
        fill=255,
        font=font,
    )

    if style.gradient:
        fill = linear_gradient(
            text_size,
            ((0.0, style.gradient_start), (1.0, style.gradient_end)),
            (0, text_size[1]),
        )
    else:
        fill = Image.new('RGBA', text_size, ImageColor.getrgb(style.color))
    fill.putalpha(mask)

    # shrink to fit, never enlarge
    scale = min(size[0] / text_size[0], size[1] / text_size[1], 1)
    return to_png(_paste_centered(Image.new('RGBA', size, TRANSPARENT), fill, scale))


def fit_image(raster: bytes, width: float, height: float) -> bytes:
    """Contain-fit an uploaded image into a transparent canvas."""
    im = open_rgba(raster, 'uploaded image')
    if im is None:
        return FALLBACK_PNG
    size = canvas_size(width, height)
    scale = min(size[0] / im.width, size[1] / im.height)
    return to_png(_paste_centered(Image.new('RGBA', size, TRANSPARENT), im, scale))


def to_rgba_png(asset: Asset) -> Asset:
    """Re-encode an asset as 32-bit RGBA PNG, keeping its representation.

    Undecodable assets are returned unchanged, the encoder substitutes them.
    """
    try:
        raw = decode_asset(asset) if isinstance(asset, str) else bytes(asset)
        with Image.open(io.BytesIO(raw)) as im:
            png = to_png(im.convert('RGBA'))
    except (OSError, ValueError):
        return asset
    return encode_asset(png) if isinstance(asset, str) else png


def normalize_images(images: Mapping[str, Asset]) -> dict[str, Asset]:
    return {key: to_rgba_png(value) for key, value in images.items()}


class BitmapProducer(Protocol):
    async def placeholder(self, width: float, height: float) -> bytes: ...

    async def text(self, style: TextStyle, width: float, height: float) -> bytes: ...

    async def fit_image(self, raster: bytes, width: float, height: float) -> bytes: ...

    async def shine_silhouette(
        self,
        raster: bytes,
        width: float,
        height: float,
    ) -> bytes: ...

    async def shine_block(self, width: float, height: float) -> bytes: ...


class PillowBitmapProducer:
    """Renders rasters with Pillow in worker threads."""

    async def placeholder(self, width: float, height: float) -> bytes:
        return await asyncio.to_thread(render_placeholder, width, height)

    async def text(self, style: TextStyle, width: float, height: float) -> bytes:
        return await asyncio.to_thread(render_text, style, width, height)

    async def fit_image(self, raster: bytes, width: float, height: float) -> bytes:
        return await asyncio.to_thread(fit_image, raster, width, height)

    async def shine_silhouette(
        self,
        raster: bytes,
        width: float,
        height: float,
    ) -> bytes:
        return await asyncio.to_thread(render_shine_silhouette, raster, width, height)

    async def shine_block(self, width: float, height: float) -> bytes:
        return await asyncio.to_thread(render_shine_block, width, height)
