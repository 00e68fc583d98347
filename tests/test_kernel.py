"""Tests for compression helpers, file io and codec settings."""

import logging
import zlib

import pytest

from svgakit.kernel import compress
from svgakit.kernel.errors import InvalidReference, MalformedContainer
from svgakit.kernel.fileio import read_file, write_file


def raw_deflate(data: bytes) -> bytes:
    comp = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return comp.compress(data) + comp.flush()


class TestCompress:
    def test_legacy_signature(self):
        assert compress.is_legacy_archive(b'PK\x03\x04')
        assert not compress.is_legacy_archive(b'x\x9c')
        assert not compress.is_legacy_archive(b'')

    def test_unpack_zlib(self):
        assert compress.unpack(zlib.compress(b'payload')) == (b'payload', True)

    def test_unpack_raw_deflate(self):
        assert compress.unpack(raw_deflate(b'payload')) == (b'payload', True)

    def test_unpack_passthrough(self):
        assert compress.unpack(b'\xff\x00') == (b'\xff\x00', False)

    def test_raw_stream_with_trailing_data(self):
        with pytest.raises(zlib.error):
            compress.inflate_raw(raw_deflate(b'payload') + b'\x00')

    def test_truncated_raw_stream(self):
        with pytest.raises(zlib.error):
            compress.inflate_raw(raw_deflate(b'payload' * 100)[:-4])

    def test_deflate_level(self):
        assert compress.deflate(b'payload')[:2] == b'x\x9c'
        assert zlib.decompress(compress.deflate(b'payload', 9)) == b'payload'


class TestFileio:
    def test_round_trip(self, tmp_path):
        path = tmp_path / 'data.bin'
        assert write_file(path, b'\x00\x01\x02') == 3
        assert read_file(path) == b'\x00\x01\x02'

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.bin'
        write_file(path, b'')
        assert read_file(path) == b''


class TestErrors:
    def test_malformed_container_context(self):
        err = MalformedContainer(True, 'truncated')
        assert err.decompressed
        assert err.detail == 'truncated'
        assert str(err) == 'failed to decode SVGA protobuf structure: truncated'

    def test_invalid_reference_message(self):
        err = InvalidReference('ghost', 'matte_key')
        assert str(err) == 'fixing missing image reference in matte_key: ghost'


class TestCodecSettings:
    def test_override_keeps_registry(self, codec):
        custom = codec(version='2.1', compress_level=9)
        assert custom.version == '2.1'
        assert custom.registry is codec.registry
        assert codec.version == '2.0'

    def test_default_logger(self, codec):
        assert codec.logger is logging.getLogger('svgakit')

    def test_version_override_is_encoded(self, codec, document):
        custom = codec(version='2.1')
        assert custom.decode(custom.encode(document)).version == '2.1'
