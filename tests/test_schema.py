"""Tests for the lazily built protobuf schema."""

import struct
import sys

import pytest

from svgakit.kernel.errors import DependencyUnavailable
from svgakit.kernel.registry import SchemaRegistry
from svgakit.movie.schema import ENUMS, MESSAGES, PACKAGE


@pytest.fixture
def registry():
    """A registry that has not been loaded yet."""
    return SchemaRegistry(PACKAGE, MESSAGES, ENUMS)


class TestSchemaRegistry:
    def test_loads_on_first_use(self, registry):
        assert not registry.loaded
        registry.message('MovieEntity')
        assert registry.loaded

    def test_message_classes_are_memoized(self, registry):
        assert registry.message('MovieEntity') is registry.message('MovieEntity')

    def test_load_is_idempotent(self, registry):
        assert registry.load() is registry.load()

    def test_missing_protobuf_runtime(self, registry, monkeypatch):
        """Without the protobuf runtime the registry reports a dependency error."""
        monkeypatch.setitem(sys.modules, 'google.protobuf', None)
        with pytest.raises(DependencyUnavailable) as excinfo:
            registry.message('MovieEntity')
        assert excinfo.value.name == 'protobuf'


class TestWireSchema:
    def test_field_numbers(self, codec):
        shape = codec.message('ShapeEntity').DESCRIPTOR
        assert shape.fields_by_name['styles'].number == 10
        assert shape.fields_by_name['transform'].number == 11
        assert [field.name for field in shape.oneofs_by_name['args'].fields] == [
            'shape',
            'rect',
            'ellipse',
        ]

    def test_images_is_a_string_to_bytes_map(self, codec):
        images = codec.message().DESCRIPTOR.fields_by_name['images']
        entry = images.message_type
        assert entry.GetOptions().map_entry
        assert entry.fields_by_name['key'].type == entry.fields_by_name['key'].TYPE_STRING
        assert (
            entry.fields_by_name['value'].type
            == entry.fields_by_name['value'].TYPE_BYTES
        )

    def test_line_dash_is_not_packed(self, codec):
        """Each dash entry carries its own tag on the wire."""
        style = codec.message('ShapeStyle')()
        style.line_dash.extend([1.0, 2.0])
        tag = bytes([(7 << 3) | 5])
        assert style.SerializeToString() == (
            tag + struct.pack('<f', 1.0) + tag + struct.pack('<f', 2.0)
        )

    def test_nested_enum_values(self, codec):
        style = codec.message('ShapeStyle').DESCRIPTOR
        line_cap = style.enum_types_by_name['LineCap']
        assert [value.name for value in line_cap.values] == [
            'LineCap_BUTT',
            'LineCap_ROUND',
            'LineCap_SQUARE',
        ]
