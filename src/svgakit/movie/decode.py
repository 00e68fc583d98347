import base64
import logging
from enum import IntEnum
from typing import Any, TypeVar

from svgakit.kernel import compress
from svgakit.kernel.errors import MalformedContainer, UnsupportedLegacyFormat
from svgakit.kernel.preset import CodecSettings
from svgakit.movie.model import (
    AudioCue,
    Document,
    EllipseArgs,
    Frame,
    Layout,
    LineCap,
    LineJoin,
    MovieParams,
    PathArgs,
    RectArgs,
    RGBAColor,
    Shape,
    ShapeArgs,
    ShapeStyle,
    ShapeType,
    Sprite,
    Transform,
)

Message = Any
E = TypeVar('E', bound=IntEnum)


def read_enum(enum: type[E], value: int, default: E) -> E:
    # proto3 enums are open, unknown values survive parsing
    try:
        return enum(value)
    except ValueError:
        return default


def read_layout(msg: Message) -> Layout:
    return Layout(x=msg.x, y=msg.y, width=msg.width, height=msg.height)


def read_transform(msg: Message) -> Transform:
    return Transform(a=msg.a, b=msg.b, c=msg.c, d=msg.d, tx=msg.tx, ty=msg.ty)


def read_color(msg: Message) -> RGBAColor:
    return RGBAColor(r=msg.r, g=msg.g, b=msg.b, a=msg.a)


def read_style(msg: Message) -> ShapeStyle:
    return ShapeStyle(
        fill=read_color(msg.fill) if msg.HasField('fill') else None,
        stroke=read_color(msg.stroke) if msg.HasField('stroke') else None,
        stroke_width=msg.stroke_width,
        line_cap=read_enum(LineCap, msg.line_cap, LineCap.BUTT),
        line_join=read_enum(LineJoin, msg.line_join, LineJoin.MITER),
        miter_limit=msg.miter_limit,
        line_dash=tuple(msg.line_dash),
    )


def read_args(msg: Message) -> ShapeArgs | None:
    variant = msg.WhichOneof('args')
    if variant == 'shape':
        return PathArgs(d=msg.shape.d)
    if variant == 'rect':
        rect = msg.rect
        return RectArgs(
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            corner_radius=rect.corner_radius,
        )
    if variant == 'ellipse':
        ellipse = msg.ellipse
        return EllipseArgs(
            x=ellipse.x,
            y=ellipse.y,
            radius_x=ellipse.radius_x,
            radius_y=ellipse.radius_y,
        )
    return None


def read_shape(msg: Message) -> Shape:
    return Shape(
        type=read_enum(ShapeType, msg.type, ShapeType.KEEP),
        args=read_args(msg),
        styles=read_style(msg.styles) if msg.HasField('styles') else None,
        transform=read_transform(msg.transform) if msg.HasField('transform') else None,
    )


def read_frame(msg: Message) -> Frame:
    return Frame(
        alpha=msg.alpha,
        layout=read_layout(msg.layout) if msg.HasField('layout') else Layout(),
        transform=(
            read_transform(msg.transform) if msg.HasField('transform') else Transform()
        ),
        clip_path=msg.clip_path,
        shapes=tuple(read_shape(shape) for shape in msg.shapes),
    )


def read_sprite(msg: Message) -> Sprite:
    return Sprite(
        image_key=msg.image_key,
        frames=tuple(read_frame(frame) for frame in msg.frames),
        matte_key=msg.matte_key,
    )


def read_audio(msg: Message) -> AudioCue:
    return AudioCue(
        audio_key=msg.audio_key,
        start_frame=msg.start_frame,
        end_frame=msg.end_frame,
        start_time=msg.start_time,
        total_time=msg.total_time,
    )


def read_params(msg: Message) -> MovieParams:
    return MovieParams(
        view_box_width=msg.view_box_width,
        view_box_height=msg.view_box_height,
        fps=msg.fps,
        frames=msg.frames,
    )


def to_document(msg: Message) -> Document:
    return Document(
        version=msg.version,
        params=read_params(msg.params),
        images={
            key: base64.b64encode(value).decode('ascii')
            for key, value in msg.images.items()
        },
        sprites=tuple(read_sprite(sprite) for sprite in msg.sprites),
        audios=tuple(read_audio(audio) for audio in msg.audios),
    )


def parse(cfg: CodecSettings, buffer: bytes) -> tuple[Message, bool]:
    if compress.is_legacy_archive(buffer):
        raise UnsupportedLegacyFormat

    payload, decompressed = compress.unpack(buffer)
    if not decompressed:
        getattr(cfg, 'logger', logging).debug(
            'payload is not deflate compressed, parsing as is'
        )

    movie = cfg.message()
    try:
        return movie.FromString(payload), decompressed
    except cfg.registry.decode_error as exc:
        raise MalformedContainer(decompressed, str(exc)) from exc


def decode(cfg: CodecSettings, buffer: bytes) -> Document:
    msg, _ = parse(cfg, buffer)
    return to_document(msg)
