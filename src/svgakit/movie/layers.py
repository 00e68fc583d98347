"""Editor layers and the export pipeline.

A layer is a named rectangle on top of the movie: either an empty key slot
the player fills at runtime, a rendered text, or an uploaded image. Export
stacks every layer onto the decoded document in order, normalizes the assets
to 32-bit PNG and encodes the result.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import StrEnum

from svgakit.graphics.raster import (
    BitmapProducer,
    PillowBitmapProducer,
    TextStyle,
    normalize_images,
)
from svgakit.kernel.preset import CodecSettings
from svgakit.movie.encode import encode
from svgakit.movie.keys import sanitize_key
from svgakit.movie.model import AnimationConfig, AnimationPreset, Document, Rect
from svgakit.movie.synth import add_layer


class LayerKind(StrEnum):
    KEY = 'key'
    TEXT = 'text'
    IMAGE = 'image'


@dataclass(frozen=True, slots=True)
class EditorLayer:
    name: str
    rect: Rect
    kind: LayerKind = LayerKind.KEY
    animations: tuple[AnimationPreset, ...] = ()
    config: AnimationConfig = AnimationConfig()
    text: TextStyle = field(default_factory=TextStyle)
    image: bytes | None = None


async def rasterize(layer: EditorLayer, producer: BitmapProducer) -> bytes | None:
    if layer.kind == LayerKind.TEXT:
        return await producer.text(layer.text, layer.rect.width, layer.rect.height)
    if layer.kind == LayerKind.IMAGE and layer.image:
        return await producer.fit_image(
            layer.image,
            layer.rect.width,
            layer.rect.height,
        )
    return None


async def apply_layers(
    cfg: CodecSettings,
    document: Document,
    layers: Iterable[EditorLayer],
    producer: BitmapProducer | None = None,
    view_box: tuple[float, float] | None = None,
) -> Document:
    producer = producer or PillowBitmapProducer()
    if view_box is not None:
        width, height = view_box
        document = replace(
            document,
            params=replace(
                document.params,
                view_box_width=width,
                view_box_height=height,
            ),
        )
    for layer in layers:
        document = await add_layer(
            cfg,
            document,
            layer.rect,
            layer.name,
            raster=await rasterize(layer, producer),
            animations=layer.animations,
            config=layer.config,
            producer=producer,
        )
    return document


async def export(
    cfg: CodecSettings,
    document: Document,
    layers: Iterable[EditorLayer],
    compress: bool = True,
    producer: BitmapProducer | None = None,
    view_box: tuple[float, float] | None = None,
) -> bytes:
    document = await apply_layers(cfg, document, layers, producer, view_box)
    document = replace(document, images=normalize_images(document.images))
    return encode(cfg, document, compress=compress)


def output_filename(name: str | None, compress: bool = True) -> str:
    stem = sanitize_key(name) or 'output'
    suffix = '' if compress else '_raw'
    return f'{stem}{suffix}.svga'
