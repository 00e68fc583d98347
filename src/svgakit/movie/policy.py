"""Field level normalization applied before a document is serialized.

proto3 drops zero valued scalars from the wire. Several native players read a
missing ``Layout`` field (or translation) as a broken frame, so those fields
get the epsilon-nonzero policy; everything else keeps true zero and only has
non-numeric values replaced by a default (safe-float policy).

Every structure is rebuilt field by field, attributes are read with
``getattr`` so ``None`` or foreign objects degrade to defaults.
"""

import math
from numbers import Real
from typing import Any

from svgakit.movie.model import (
    AudioCue,
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
    Transform,
)

EPSILON = 0.00001


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def safe_float(value: Any, default: float = 0.0) -> float:
    return float(value) if _is_number(value) else default


def force_nonzero(value: Any, default: float = 0.0) -> float:
    num = safe_float(value, default)
    if abs(num) <= EPSILON:
        return -EPSILON if num < 0 else EPSILON
    return num


def safe_int(value: Any, default: int = 0) -> int:
    num = safe_float(value, 0.0)
    # half rounds up, as players written against JavaScript expect
    if not num or not math.isfinite(num):
        return default
    return math.floor(num + 0.5)


def safe_str(value: Any) -> str:
    return value if isinstance(value, str) else ''


def sanitize_color(color: Any) -> RGBAColor:
    return RGBAColor(
        r=safe_float(getattr(color, 'r', None)),
        g=safe_float(getattr(color, 'g', None)),
        b=safe_float(getattr(color, 'b', None)),
        a=safe_float(getattr(color, 'a', None)),
    )


def sanitize_transform(transform: Any) -> Transform:
    return Transform(
        a=safe_float(getattr(transform, 'a', None), 1.0),
        b=safe_float(getattr(transform, 'b', None), 0.0),
        c=safe_float(getattr(transform, 'c', None), 0.0),
        d=safe_float(getattr(transform, 'd', None), 1.0),
        tx=force_nonzero(getattr(transform, 'tx', None)),
        ty=force_nonzero(getattr(transform, 'ty', None)),
    )


def sanitize_layout(layout: Any) -> Layout:
    return Layout(
        x=force_nonzero(getattr(layout, 'x', None)),
        y=force_nonzero(getattr(layout, 'y', None)),
        width=force_nonzero(getattr(layout, 'width', None)),
        height=force_nonzero(getattr(layout, 'height', None)),
    )


def _coerce(enum: type[LineCap] | type[LineJoin], value: Any) -> Any:
    try:
        return enum(value)
    except (TypeError, ValueError):
        return enum(0)


def sanitize_style(style: Any) -> ShapeStyle:
    fill = getattr(style, 'fill', None)
    stroke = getattr(style, 'stroke', None)
    dash = getattr(style, 'line_dash', None) or ()
    return ShapeStyle(
        fill=sanitize_color(fill) if fill is not None else None,
        stroke=sanitize_color(stroke) if stroke is not None else None,
        stroke_width=safe_float(getattr(style, 'stroke_width', None)),
        line_cap=_coerce(LineCap, getattr(style, 'line_cap', 0) or 0),
        line_join=_coerce(LineJoin, getattr(style, 'line_join', 0) or 0),
        miter_limit=safe_float(getattr(style, 'miter_limit', None)),
        line_dash=tuple(safe_float(value) for value in dash),
    )


def sanitize_args(args: Any) -> ShapeArgs | None:
    if isinstance(args, PathArgs):
        return PathArgs(d=safe_str(args.d))
    if isinstance(args, RectArgs):
        return RectArgs(
            x=safe_float(args.x),
            y=safe_float(args.y),
            width=safe_float(args.width),
            height=safe_float(args.height),
            corner_radius=safe_float(args.corner_radius),
        )
    if isinstance(args, EllipseArgs):
        return EllipseArgs(
            x=safe_float(args.x),
            y=safe_float(args.y),
            radius_x=safe_float(args.radius_x),
            radius_y=safe_float(args.radius_y),
        )
    return None


def sanitize_shape(shape: Any) -> Shape:
    try:
        shape_type = ShapeType(getattr(shape, 'type', 0) or 0)
    except (TypeError, ValueError):
        shape_type = ShapeType.KEEP
    args = sanitize_args(getattr(shape, 'args', None))
    if shape_type == ShapeType.SHAPE and not (isinstance(args, PathArgs) and args.d):
        # a path shape without path data is emitted as a no-op
        shape_type = ShapeType.KEEP
        args = None

    styles = getattr(shape, 'styles', None)
    transform = getattr(shape, 'transform', None)
    return Shape(
        type=shape_type,
        args=args,
        styles=sanitize_style(styles) if styles is not None else None,
        transform=sanitize_transform(transform) if transform is not None else None,
    )


def sanitize_frame(frame: Any) -> Frame:
    return Frame(
        alpha=safe_float(getattr(frame, 'alpha', None), 1.0),
        layout=sanitize_layout(getattr(frame, 'layout', None)),
        transform=sanitize_transform(getattr(frame, 'transform', None)),
        clip_path=safe_str(getattr(frame, 'clip_path', '')),
        shapes=tuple(
            sanitize_shape(shape) for shape in getattr(frame, 'shapes', None) or ()
        ),
    )


def sanitize_params(
    params: Any,
    view_box: float = 800.0,
    fps: int = 20,
) -> MovieParams:
    return MovieParams(
        view_box_width=safe_float(getattr(params, 'view_box_width', None), view_box),
        view_box_height=safe_float(getattr(params, 'view_box_height', None), view_box),
        fps=safe_int(getattr(params, 'fps', None), fps),
        frames=safe_int(getattr(params, 'frames', None), 0),
    )


def sanitize_audio(audio: Any, audio_key: str) -> AudioCue:
    return AudioCue(
        audio_key=audio_key,
        start_frame=safe_int(getattr(audio, 'start_frame', None)),
        end_frame=safe_int(getattr(audio, 'end_frame', None)),
        start_time=safe_int(getattr(audio, 'start_time', None)),
        total_time=safe_int(getattr(audio, 'total_time', None)),
    )
