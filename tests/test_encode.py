"""Tests for document sanitizing and encoding."""

import base64
import sys
import zlib
from dataclasses import replace
from types import SimpleNamespace

import pytest

from svgakit.kernel.errors import DependencyUnavailable, EncodingError
from svgakit.kernel.registry import SchemaRegistry
from svgakit.movie.keys import FALLBACK_PNG
from svgakit.movie.model import (
    AudioCue,
    Document,
    Frame,
    Layout,
    MovieParams,
    PathArgs,
    Shape,
    ShapeStyle,
    ShapeType,
    Sprite,
    Transform,
)
from svgakit.movie.policy import EPSILON
from svgakit.movie.schema import ENUMS, MESSAGES, PACKAGE


class TestSanitizeDocument:
    def test_version_is_forced(self, codec, document):
        assert codec.sanitize(replace(document, version='1.5')).version == '2.0'

    def test_missing_params_get_defaults(self, codec):
        sanitized = codec.sanitize(SimpleNamespace(params=None))
        assert sanitized.params == MovieParams(
            view_box_width=800.0,
            view_box_height=800.0,
            fps=20,
            frames=0,
        )
        assert sanitized.sprites == ()
        assert sanitized.images == {}

    def test_defaults_follow_codec_settings(self, codec):
        sanitized = codec(fps=30, view_box=400.0).sanitize(SimpleNamespace())
        assert sanitized.params.fps == 30
        assert sanitized.params.view_box_width == 400.0

    def test_is_idempotent(self, codec, document):
        document = replace(
            document,
            images={**document.images, 'bad key': b'\x00'},
            sprites=(*document.sprites, Sprite(image_key='ghost', frames=(Frame(),))),
        )
        once = codec.sanitize(document)
        assert codec.sanitize(once) == once

    def test_dangling_reference_to_collision_name(self, codec):
        document = Document(
            images={'a b': b'X', 'a_b': b'Y'},
            sprites=(Sprite(image_key='a_b_1', frames=(Frame(),)),),
        )
        once = codec.sanitize(document)
        (sprite,) = once.sprites
        assert once.images[sprite.image_key] == FALLBACK_PNG
        assert once.images['a_b_1'] == b'Y'
        assert codec.sanitize(once) == once


class TestEncode:
    def test_output_is_zlib_framed(self, codec, document):
        data = codec.encode(document)
        assert data[0] == 0x78
        assert zlib.decompress(data) == codec.encode(document, compress=False)

    def test_round_trip(self, codec, document):
        shape = Shape(
            type=ShapeType.SHAPE,
            args=PathArgs(d='M 0 0 L 10 10'),
            styles=ShapeStyle(stroke_width=2.0, line_dash=(4.0, 2.0)),
        )
        frame = Frame(
            alpha=0.5,
            layout=Layout(10.0, 20.0, 100.0, 50.0),
            transform=Transform(a=0.25, d=0.5, tx=8.0, ty=16.0),
            clip_path='M 0 0 Z',
            shapes=(shape,),
        )
        document = replace(
            document,
            sprites=(Sprite(image_key='bg', frames=(frame,)),),
            audios=(AudioCue(audio_key='beep', start_frame=1, end_frame=5),),
        )

        decoded = codec.decode(codec.encode(document))
        assert decoded.params == document.params
        assert decoded.images == document.images
        assert decoded.sprites[0].frames[0] == frame
        assert decoded.audios == document.audios

    def test_missing_image_reference(self, codec, caplog):
        """A sprite bound to an absent key still encodes, with the fallback asset."""
        document = Document(
            params=MovieParams(view_box_width=100.0, view_box_height=100.0, frames=1),
            sprites=(Sprite(image_key='ghost', frames=(Frame(alpha=1.0),)),),
        )
        decoded = codec.decode(codec.encode(document))
        assert decoded.images == {
            'ghost': base64.b64encode(FALLBACK_PNG).decode('ascii'),
        }
        assert any(
            getattr(record, 'repair', None) == 'InvalidReference'
            for record in caplog.records
        )

    def test_layout_and_translation_never_zero(self, codec):
        document = Document(sprites=(Sprite(frames=(Frame(alpha=1.0),)),))
        (frame,) = codec.decode(codec.encode(document)).sprites[0].frames
        for value in (
            frame.layout.x,
            frame.layout.y,
            frame.layout.width,
            frame.layout.height,
            frame.transform.tx,
            frame.transform.ty,
        ):
            assert value == pytest.approx(EPSILON)
        assert frame.transform.a == 1.0
        assert frame.transform.b == 0.0

    def test_assets_are_stored_as_bytes(self, codec):
        document = Document(images={'a': base64.b64encode(b'png').decode('ascii')})
        msg, _ = codec.parse(codec.encode(document))
        assert msg.images['a'] == b'png'

    def test_audio_is_rounded(self, codec):
        document = Document(audios=(SimpleNamespace(audio_key='a b', start_frame=2.5),))
        (audio,) = codec.decode(codec.encode(document)).audios
        assert audio.audio_key == 'a_b'
        assert audio.start_frame == 3

    def test_out_of_range_value_fails_atomically(self, codec):
        document = Document(audios=(AudioCue(audio_key='a', start_frame=2**40),))
        with pytest.raises(EncodingError):
            codec.encode(document)

    def test_non_finite_audio_frame(self, codec):
        document = Document(audios=(AudioCue(audio_key='a', start_frame=float('nan')),))
        (audio,) = codec.decode(codec.encode(document)).audios
        assert audio.start_frame == 0

    def test_missing_protobuf_runtime(self, codec, document, monkeypatch):
        fresh = codec(registry=SchemaRegistry(PACKAGE, MESSAGES, ENUMS))
        monkeypatch.setitem(sys.modules, 'google.protobuf', None)
        with pytest.raises(DependencyUnavailable):
            fresh.encode(document)
