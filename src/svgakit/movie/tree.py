import io
import sys
from collections.abc import Iterable, Iterator
from typing import IO, Any

from parse import parse  # type: ignore[import-untyped]

from svgakit.movie.model import Document, Frame, Sprite


def findall(pattern: str, root: Document | Iterable[Sprite] | None) -> Iterator[Sprite]:
    if not root:
        return
    if isinstance(root, Document):
        root = root.sprites
    for sprite in root:
        if parse(pattern, sprite.image_key, evaluate_result=False):
            yield sprite


def find(pattern: str, root: Document | Iterable[Sprite] | None) -> Sprite | None:
    return next(findall(pattern, root), None)


def _attribs(**attribs: Any) -> str:
    return ''.join(
        f' {key}="{value}"' for key, value in attribs.items() if value not in (None, '')
    )


def _render_frame(frame: Frame, indent: str, stream: IO[str]) -> None:
    layout, transform = frame.layout, frame.transform
    print(
        f'{indent}<frame'
        + _attribs(
            alpha=frame.alpha,
            layout=f'{layout.x},{layout.y},{layout.width},{layout.height}',
            transform=(
                f'{transform.a},{transform.b},{transform.c},'
                f'{transform.d},{transform.tx},{transform.ty}'
            ),
            clip=frame.clip_path,
            shapes=len(frame.shapes) or None,
        )
        + ' />',
        file=stream,
    )


def render(
    document: Document,
    level: int = 0,
    stream: IO[str] = sys.stdout,
    frames: bool = False,
) -> None:
    indent = '    ' * level
    inner = '    ' * (level + 1)
    params = document.params
    print(f'{indent}<movie{_attribs(version=document.version)}>', file=stream)
    print(
        f'{inner}<params'
        + _attribs(
            width=params.view_box_width,
            height=params.view_box_height,
            fps=params.fps,
            frames=params.frames,
        )
        + ' />',
        file=stream,
    )
    for key, value in document.images.items():
        print(f'{inner}<image{_attribs(key=key, size=len(value))} />', file=stream)
    for sprite in document.sprites:
        attribs = _attribs(
            image=sprite.image_key,
            matte=sprite.matte_key,
            frames=len(sprite.frames),
        )
        if not (frames and sprite.frames):
            print(f'{inner}<sprite{attribs} />', file=stream)
            continue
        print(f'{inner}<sprite{attribs}>', file=stream)
        for frame in sprite.frames:
            _render_frame(frame, '    ' * (level + 2), stream)
        print(f'{inner}</sprite>', file=stream)
    for audio in document.audios:
        print(
            f'{inner}<audio'
            + _attribs(
                key=audio.audio_key,
                start=audio.start_frame,
                end=audio.end_frame,
            )
            + ' />',
            file=stream,
        )
    print(f'{indent}</movie>', file=stream)


def renders(document: Document, frames: bool = False) -> str:
    with io.StringIO() as stream:
        render(document, stream=stream, frames=frames)
        return stream.getvalue()
