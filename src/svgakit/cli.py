import asyncio
import logging
import pathlib
from dataclasses import replace

import typer
from parse import parse  # type: ignore[import-untyped]

from svgakit.graphics.raster import TextStyle, measure_text
from svgakit.kernel.errors import SvgaError
from svgakit.kernel.fileio import read_file, write_file
from svgakit.movie.layers import EditorLayer, LayerKind, output_filename
from svgakit.movie.model import AnimationConfig, AnimationPreset, Rect
from svgakit.movie.preset import svga

app = typer.Typer()


def parse_rect(text: str) -> Rect:
    res = parse('{x:g},{y:g},{width:g},{height:g}', text.replace(' ', ''))
    if not res:
        raise typer.BadParameter(f'expected x,y,width,height but got {text!r}')
    return Rect(**res.named)


def patched_name(filename: str) -> str:
    return f'{pathlib.Path(filename).stem}_patched'


def fail(exc: Exception) -> typer.Exit:
    typer.echo(f'error: {exc}', err=True)
    return typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, '--verbose', '-v', help='log repairs'),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


@app.command()
def info(
    filename: str = typer.Argument(..., help='*.svga file to read from'),
    frames: bool = typer.Option(False, '--frames', help='dump every frame'),
) -> None:
    try:
        document = svga.decode(read_file(filename))
    except (SvgaError, OSError) as exc:
        raise fail(exc) from exc
    typer.echo(svga.renders(document, frames=frames), nl=False)


@app.command()
def reencode(
    filename: str = typer.Argument(..., help='*.svga file to read from'),
    output: str | None = typer.Option(None, '--output', '-o'),
    raw: bool = typer.Option(False, '--raw', help='skip deflate compression'),
) -> None:
    try:
        data = svga.encode(svga.decode(read_file(filename)), compress=not raw)
    except (SvgaError, OSError) as exc:
        raise fail(exc) from exc
    output = output or output_filename(patched_name(filename), not raw)
    write_file(output, data)
    typer.echo(f'wrote {output} ({len(data)} bytes)')


@app.command()
def add_layer(
    filename: str = typer.Argument(..., help='*.svga file to read from'),
    name: str = typer.Option(..., '--name', help='image key of the new layer'),
    rect: str = typer.Option(..., '--rect', help='x,y,width,height'),
    kind: LayerKind = typer.Option(LayerKind.KEY, '--kind'),
    text: str = typer.Option('Your Text', '--text'),
    font_size: int = typer.Option(24, '--font-size'),
    color: str = typer.Option('#ffffff', '--color'),
    image: str | None = typer.Option(None, '--image', help='file for image layers'),
    animate: list[AnimationPreset] = typer.Option([], '--animate', '-a'),
    cycles: float = typer.Option(1.0, '--cycles'),
    intensity: float = typer.Option(1.0, '--intensity'),
    raw: bool = typer.Option(False, '--raw', help='skip deflate compression'),
    output: str | None = typer.Option(None, '--output', '-o'),
) -> None:
    try:
        config = AnimationConfig(cycles=cycles, intensity=intensity)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    area = parse_rect(rect)
    if kind == LayerKind.TEXT and not (area.width > 0 and area.height > 0):
        # size the layer to the text
        width, height = measure_text(text, font_size)
        area = replace(area, width=float(width), height=float(height))

    layer = EditorLayer(
        name=name,
        rect=area,
        kind=kind,
        animations=tuple(animate),
        config=config,
        text=TextStyle(content=text, size=font_size, color=color),
    )

    try:
        if image:
            layer = replace(layer, image=read_file(image))
        document = svga.decode(read_file(filename))
        data = asyncio.run(svga.export(document, [layer], compress=not raw))
    except (SvgaError, ValueError, OSError) as exc:
        raise fail(exc) from exc

    output = output or output_filename(patched_name(filename), not raw)
    write_file(output, data)
    typer.echo(f'wrote {output} ({len(data)} bytes)')


if __name__ == '__main__':
    app()
