import logging
import math
from collections.abc import Iterable
from dataclasses import replace
from typing import NamedTuple

import numpy as np

from svgakit.graphics.raster import BitmapProducer, PillowBitmapProducer
from svgakit.kernel.preset import CodecSettings
from svgakit.movie.keys import encode_asset, sanitize_key
from svgakit.movie.model import (
    AnimationConfig,
    AnimationPreset,
    Document,
    Frame,
    Layout,
    Rect,
    Sprite,
    Transform,
)

SHINE_SUFFIX = '_shine'
PULSE_AMPLITUDE = 0.05
FLOAT_AMPLITUDE = 6.0
SHINE_WIDTH = 0.4
SHINE_TILT = math.tan(math.radians(30))


class ShineBand(NamedTuple):
    offset: float  # fraction of the layer width
    alpha: float


# leading, center, trailing
SHINE_BANDS = (
    ShineBand(-0.05, 0.3),
    ShineBand(0.0, 0.9),
    ShineBand(0.05, 0.3),
)


def to_presets(animations: Iterable[str]) -> frozenset[AnimationPreset]:
    return frozenset(AnimationPreset(name) for name in animations)


def format_number(value: float) -> str:
    # integral values are written without a fraction, like JavaScript does
    return str(int(value)) if value.is_integer() else repr(value)


def shine_clip_path(
    cx: float,
    band_width: float,
    x_offset: float,
    height: float,
) -> str:
    half = band_width / 2
    points = (
        (cx + x_offset - half, 0.0),
        (cx + x_offset + half, 0.0),
        (cx - x_offset + half, height),
        (cx - x_offset - half, height),
    )
    (x1, y1), *rest = ((format_number(x), format_number(y)) for x, y in points)
    return ' '.join([f'M {x1} {y1}', *(f'L {x} {y}' for x, y in rest), 'Z'])


def main_frames(
    rect: Rect,
    total: int,
    animations: Iterable[str] = (),
    config: AnimationConfig = AnimationConfig(),
) -> tuple[Frame, ...]:
    if rect.width <= 0 or rect.height <= 0:
        return (Frame(alpha=0.0),) * total

    presets = to_presets(animations)
    theta = np.arange(total) / max(total, 1) * 2 * np.pi * config.cycles
    wave = np.sin(theta)

    scale = np.ones(total)
    if AnimationPreset.PULSE in presets:
        scale = scale + wave * PULSE_AMPLITUDE * config.intensity
    offset_y = np.zeros(total)
    if AnimationPreset.FLOAT in presets:
        offset_y = wave * FLOAT_AMPLITUDE * config.intensity

    tx = rect.x + rect.width * (1 - scale) / 2
    ty = rect.y + rect.height * (1 - scale) / 2 + offset_y

    layout = Layout(0.0, 0.0, rect.width, rect.height)
    return tuple(
        Frame(
            alpha=1.0,
            layout=layout,
            transform=Transform(a=s, d=s, tx=x, ty=y),
        )
        for s, x, y in zip(scale.tolist(), tx.tolist(), ty.tolist())
    )


def shine_frames(
    rect: Rect,
    total: int,
    band: ShineBand,
    config: AnimationConfig = AnimationConfig(),
) -> tuple[Frame, ...]:
    """Frames of one shine band sweeping across the layer.

    The band is a parallelogram clip path tilted by 30 degrees that travels
    from fully left of the layer to fully right of it once per cycle.
    """
    width, height = float(rect.width), float(rect.height)
    band_width = width * SHINE_WIDTH * config.intensity
    x_offset = height * SHINE_TILT
    start = -band_width - x_offset
    span = width + 2 * band_width + 2 * x_offset

    progress = (np.arange(total) / max(total, 1) * config.cycles) % 1.0
    centers = start + span * progress + band.offset * width

    layout = Layout(0.0, 0.0, width, height)
    transform = Transform(tx=rect.x, ty=rect.y)
    return tuple(
        Frame(
            alpha=band.alpha,
            layout=layout,
            transform=transform,
            clip_path=shine_clip_path(cx, band_width, x_offset, height),
        )
        for cx in centers.tolist()
    )


def compose_layer(
    cfg: CodecSettings,
    document: Document,
    rect: Rect,
    key_name: str,
    raster: bytes,
    shine_raster: bytes | None = None,
    animations: Iterable[str] = (),
    config: AnimationConfig = AnimationConfig(),
) -> Document:
    """Return a copy of ``document`` with a new animated layer on top.

    The layer is one sprite bound to ``raster`` and, for the shine preset,
    three band sprites bound to ``shine_raster``. Every sprite has exactly
    ``params.frames`` frames.
    """
    key = sanitize_key(key_name)
    if not key:
        raise ValueError(f'layer key is empty after sanitizing: {key_name!r}')

    presets = to_presets(animations)
    total = max(0, int(document.params.frames or 0))

    images = dict(document.images)
    images[key] = encode_asset(raster)
    sprites = [Sprite(image_key=key, frames=main_frames(rect, total, presets, config))]

    if AnimationPreset.SHINE in presets:
        if shine_raster is None:
            raise ValueError('shine animation requires a shine raster')
        shine_key = key + SHINE_SUFFIX
        images[shine_key] = encode_asset(shine_raster)
        sprites.extend(
            Sprite(image_key=shine_key, frames=shine_frames(rect, total, band, config))
            for band in SHINE_BANDS
        )

    getattr(cfg, 'logger', logging).debug(
        f'added layer {key} with {len(sprites)} sprites over {total} frames'
    )
    return replace(document, images=images, sprites=(*document.sprites, *sprites))


async def add_layer(
    cfg: CodecSettings,
    document: Document,
    rect: Rect,
    key_name: str,
    raster: bytes | None = None,
    animations: Iterable[str] = (),
    config: AnimationConfig = AnimationConfig(),
    producer: BitmapProducer | None = None,
) -> Document:
    producer = producer or PillowBitmapProducer()
    presets = to_presets(animations)

    shine_raster = None
    if AnimationPreset.SHINE in presets:
        if raster:
            shine_raster = await producer.shine_silhouette(
                raster,
                rect.width,
                rect.height,
            )
        else:
            shine_raster = await producer.shine_block(rect.width, rect.height)

    if not raster:
        raster = await producer.placeholder(rect.width, rect.height)

    return compose_layer(
        cfg,
        document,
        rect,
        key_name,
        raster,
        shine_raster,
        presets,
        config,
    )
