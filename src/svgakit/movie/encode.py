import zlib
from dataclasses import fields
from typing import Any

from svgakit.kernel.compress import deflate
from svgakit.kernel.errors import EncodingError
from svgakit.kernel.preset import CodecSettings
from svgakit.movie.keys import KeyRegistry, sanitize_key
from svgakit.movie.model import ARGS_FIELDS, Document, Frame, Shape, ShapeStyle, Sprite
from svgakit.movie.policy import (
    sanitize_audio,
    sanitize_frame,
    sanitize_params,
)

Message = Any


def sanitize_document(cfg: CodecSettings, document: Any) -> Document:
    """Rebuild a document into its wire-ready form.

    Asset keys are sanitized and decoded to bytes, dangling sprite references
    are bound to the fallback asset and every frame goes through the field
    policy. The result is a fixed point: sanitizing it again is a no-op.
    """
    keys = KeyRegistry(cfg.logger)
    keys.add_images(getattr(document, 'images', None))

    sprites = []
    for sprite in getattr(document, 'sprites', None) or ():
        image_key, matte_key = keys.repair(sprite)
        sprites.append(
            Sprite(
                image_key=image_key,
                frames=tuple(
                    sanitize_frame(frame)
                    for frame in getattr(sprite, 'frames', None) or ()
                ),
                matte_key=matte_key,
            )
        )

    audios = tuple(
        sanitize_audio(audio, sanitize_key(getattr(audio, 'audio_key', '')))
        for audio in getattr(document, 'audios', None) or ()
    )

    return Document(
        version=cfg.version,
        params=sanitize_params(
            getattr(document, 'params', None),
            view_box=cfg.view_box,
            fps=cfg.fps,
        ),
        images=keys.images,
        sprites=tuple(sprites),
        audios=audios,
    )


def write_fields(msg: Message, value: Any) -> Message:
    msg.SetInParent()
    for field in fields(value):
        setattr(msg, field.name, getattr(value, field.name))
    return msg


def write_style(msg: Message, style: ShapeStyle) -> None:
    msg.SetInParent()
    if style.fill is not None:
        write_fields(msg.fill, style.fill)
    if style.stroke is not None:
        write_fields(msg.stroke, style.stroke)
    msg.stroke_width = style.stroke_width
    msg.line_cap = int(style.line_cap)
    msg.line_join = int(style.line_join)
    msg.miter_limit = style.miter_limit
    msg.line_dash.extend(style.line_dash)


def write_shape(msg: Message, shape: Shape) -> None:
    msg.type = int(shape.type)
    if shape.args is not None:
        write_fields(getattr(msg, ARGS_FIELDS[type(shape.args)]), shape.args)
    if shape.styles is not None:
        write_style(msg.styles, shape.styles)
    if shape.transform is not None:
        write_fields(msg.transform, shape.transform)


def write_frame(msg: Message, frame: Frame) -> None:
    msg.alpha = frame.alpha
    write_fields(msg.layout, frame.layout)
    write_fields(msg.transform, frame.transform)
    msg.clip_path = frame.clip_path
    for shape in frame.shapes:
        write_shape(msg.shapes.add(), shape)


def to_message(cfg: CodecSettings, document: Document) -> Message:
    """Fill a root message from an already sanitized document."""
    msg = cfg.message()()
    msg.version = document.version
    write_fields(msg.params, document.params)
    for key, data in document.images.items():
        msg.images[key] = data
    for sprite in document.sprites:
        entity = msg.sprites.add()
        entity.image_key = sprite.image_key
        entity.matte_key = sprite.matte_key
        for frame in sprite.frames:
            write_frame(entity.frames.add(), frame)
    for audio in document.audios:
        write_fields(msg.audios.add(), audio)
    return msg


def encode(cfg: CodecSettings, document: Any, compress: bool = True) -> bytes:
    # DependencyUnavailable propagates unwrapped
    cfg.message()
    try:
        payload = to_message(cfg, sanitize_document(cfg, document)).SerializeToString()
        if compress:
            payload = deflate(payload, cfg.compress_level)
    except (
        ValueError,
        TypeError,
        OverflowError,
        zlib.error,
        cfg.registry.encode_error,
    ) as exc:
        raise EncodingError(str(exc)) from exc
    return payload
