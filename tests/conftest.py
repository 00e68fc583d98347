"""
Pytest fixtures for svgakit tests
"""

import pytest

from svgakit.graphics.raster import TextStyle
from svgakit.movie.keys import FALLBACK_PNG, encode_asset
from svgakit.movie.model import Document, Frame, Layout, MovieParams, Sprite
from svgakit.movie.preset import Codec, svga


class FakeProducer:
    """Bitmap producer returning fixed bytes and recording every call."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def placeholder(self, width: float, height: float) -> bytes:
        self.calls.append(('placeholder', width, height))
        return b'placeholder'

    async def text(self, style: TextStyle, width: float, height: float) -> bytes:
        self.calls.append(('text', style.content, width, height))
        return b'text'

    async def fit_image(self, raster: bytes, width: float, height: float) -> bytes:
        self.calls.append(('fit_image', raster, width, height))
        return b'fitted'

    async def shine_silhouette(
        self,
        raster: bytes,
        width: float,
        height: float,
    ) -> bytes:
        self.calls.append(('shine_silhouette', raster, width, height))
        return b'silhouette'

    async def shine_block(self, width: float, height: float) -> bytes:
        self.calls.append(('shine_block', width, height))
        return b'block'

    @property
    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def codec() -> Codec:
    """The default SVGA 2.0 codec."""
    return svga


@pytest.fixture
def producer() -> FakeProducer:
    return FakeProducer()


@pytest.fixture
def document() -> Document:
    """A small movie: one background sprite over ten frames."""
    frame = Frame(alpha=1.0, layout=Layout(0.0, 0.0, 750.0, 750.0))
    return Document(
        version='2.0',
        params=MovieParams(
            view_box_width=750.0,
            view_box_height=750.0,
            fps=20,
            frames=10,
        ),
        images={'bg': encode_asset(FALLBACK_PNG)},
        sprites=(Sprite(image_key='bg', frames=(frame,) * 10),),
    )


@pytest.fixture
def svga_bytes(codec: Codec, document: Document) -> bytes:
    return codec.encode(document)
