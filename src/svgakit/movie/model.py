from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum

Asset = str | bytes


class ShapeType(IntEnum):
    SHAPE = 0
    RECT = 1
    ELLIPSE = 2
    KEEP = 3


class LineCap(IntEnum):
    BUTT = 0
    ROUND = 1
    SQUARE = 2


class LineJoin(IntEnum):
    MITER = 0
    ROUND = 1
    BEVEL = 2


class AnimationPreset(StrEnum):
    PULSE = 'pulse'
    FLOAT = 'float'
    SHINE = 'shine'


@dataclass(frozen=True, slots=True)
class Rect:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True, slots=True)
class Layout:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True, slots=True)
class Transform:
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0


@dataclass(frozen=True, slots=True)
class RGBAColor:
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 0.0


@dataclass(frozen=True, slots=True)
class PathArgs:
    d: str = ''


@dataclass(frozen=True, slots=True)
class RectArgs:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    corner_radius: float = 0.0


@dataclass(frozen=True, slots=True)
class EllipseArgs:
    x: float = 0.0
    y: float = 0.0
    radius_x: float = 0.0
    radius_y: float = 0.0


ShapeArgs = PathArgs | RectArgs | EllipseArgs

# wire field of each shape payload variant
ARGS_FIELDS: dict[type, str] = {
    PathArgs: 'shape',
    RectArgs: 'rect',
    EllipseArgs: 'ellipse',
}


@dataclass(frozen=True, slots=True)
class ShapeStyle:
    fill: RGBAColor | None = None
    stroke: RGBAColor | None = None
    stroke_width: float = 0.0
    line_cap: LineCap = LineCap.BUTT
    line_join: LineJoin = LineJoin.MITER
    miter_limit: float = 0.0
    line_dash: tuple[float, ...] = ()


@dataclass(frozen=True, slots=True)
class Shape:
    type: ShapeType = ShapeType.SHAPE
    args: ShapeArgs | None = None
    styles: ShapeStyle | None = None
    transform: Transform | None = None


@dataclass(frozen=True, slots=True)
class Frame:
    alpha: float = 0.0
    layout: Layout = Layout()
    transform: Transform = Transform()
    clip_path: str = ''
    shapes: tuple[Shape, ...] = ()


@dataclass(frozen=True, slots=True)
class Sprite:
    image_key: str = ''
    frames: tuple[Frame, ...] = ()
    matte_key: str = ''


@dataclass(frozen=True, slots=True)
class AudioCue:
    audio_key: str = ''
    start_frame: int = 0
    end_frame: int = 0
    start_time: int = 0
    total_time: int = 0


@dataclass(frozen=True, slots=True)
class MovieParams:
    view_box_width: float = 0.0
    view_box_height: float = 0.0
    fps: int = 0
    frames: int = 0


@dataclass(frozen=True, slots=True)
class Document:
    """One animation container.

    Assets are base64 text as produced by the decoder; the encoder also
    accepts raw bytes. Collections other than ``images`` are tuples, and
    ``images`` is never written to after construction: every transformation
    builds a new mapping.
    """

    version: str = ''
    params: MovieParams = MovieParams()
    images: Mapping[str, Asset] = field(default_factory=dict)
    sprites: tuple[Sprite, ...] = ()
    audios: tuple[AudioCue, ...] = ()


@dataclass(frozen=True, slots=True)
class AnimationConfig:
    cycles: float = 1.0
    intensity: float = 1.0

    def __post_init__(self) -> None:
        if not self.cycles > 0:
            raise ValueError(f'cycles must be positive, got {self.cycles}')
        if not self.intensity > 0:
            raise ValueError(f'intensity must be positive, got {self.intensity}')
