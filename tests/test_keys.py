"""Tests for asset key sanitizing and reference repair."""

import base64
import logging

import pytest

from svgakit.movie.keys import (
    FALLBACK_PNG,
    KeyRegistry,
    decode_asset,
    sanitize_key,
)
from svgakit.movie.model import Sprite


@pytest.fixture
def keys():
    return KeyRegistry(logging.getLogger('svgakit.test'))


def repairs(caplog, kind):
    return [record for record in caplog.records if getattr(record, 'repair', None) == kind]


class TestSanitizeKey:
    @pytest.mark.parametrize(
        ('key', 'expected'),
        [
            ('My Key!', 'My_Key_'),
            ('layer-1_ok', 'layer-1_ok'),
            ('ünï', '_n_'),
            ('', ''),
            (None, ''),
        ],
    )
    def test_sanitize(self, key, expected):
        assert sanitize_key(key) == expected


class TestDecodeAsset:
    def test_data_uri_prefix_is_stripped(self):
        text = 'data:image/png;base64,' + base64.b64encode(b'abc').decode('ascii')
        assert decode_asset(text) == b'abc'

    def test_missing_padding_and_whitespace(self):
        assert decode_asset('YW\nJj ZA') == b'abcd'

    def test_invalid_characters(self):
        with pytest.raises(ValueError):
            decode_asset('not base64!')


class TestKeyRegistry:
    def test_images_are_decoded_to_bytes(self, keys):
        keys.add_images({'a': base64.b64encode(b'png').decode('ascii'), 'b': b'raw'})
        assert keys.images == {'a': b'png', 'b': b'raw'}

    def test_keys_are_sanitized(self, keys):
        keys.add_images({'my key': b'x'})
        assert keys.images == {'my_key': b'x'}
        assert keys.resolve('my key') == 'my_key'

    def test_collisions_keep_mapping_injective(self, keys, caplog):
        keys.add_images({'a b': b'1', 'a_b': b'2', 'a.b': b'3'})
        assert keys.mapping == {'a b': 'a_b', 'a_b': 'a_b_1', 'a.b': 'a_b_2'}
        assert keys.images == {'a_b': b'1', 'a_b_1': b'2', 'a_b_2': b'3'}
        assert len(repairs(caplog, 'KeyCollision')) == 2

    def test_invalid_base64_is_replaced(self, keys, caplog):
        keys.add_images({'broken': '%%%'})
        assert keys.images == {'broken': FALLBACK_PNG}
        (record,) = repairs(caplog, 'InvalidRasterData')
        assert record.key == 'broken'
        assert record.levelno == logging.WARNING

    def test_empty_asset_is_replaced(self, keys, caplog):
        keys.add_images({'empty': '', 'nothing': b''})
        assert keys.images == {'empty': FALLBACK_PNG, 'nothing': FALLBACK_PNG}
        assert len(repairs(caplog, 'InvalidRasterData')) == 2

    def test_non_asset_values_are_skipped(self, keys):
        keys.add_images({'number': 12})
        assert keys.images == {}

    def test_dangling_reference_gets_fallback(self, keys, caplog):
        image_key, matte_key = keys.repair(Sprite(image_key='ghost'))
        assert (image_key, matte_key) == ('ghost', '')
        assert keys.images == {'ghost': FALLBACK_PNG}
        (record,) = repairs(caplog, 'InvalidReference')
        assert 'ghost' in record.getMessage()

    def test_matte_reference_is_repaired(self, keys, caplog):
        keys.add_images({'bg': b'x'})
        assert keys.repair(Sprite(image_key='bg', matte_key='mask 1')) == (
            'bg',
            'mask_1',
        )
        assert keys.images['mask_1'] == FALLBACK_PNG
        assert 'matte_key' in repairs(caplog, 'InvalidReference')[0].getMessage()

    def test_vector_sprite_is_left_alone(self, keys, caplog):
        assert keys.repair(Sprite()) == ('', '')
        assert keys.images == {}
        assert not caplog.records

    def test_reference_follows_renamed_key(self, keys):
        keys.add_images({'a b': b'1', 'a_b': b'2'})
        assert keys.repair(Sprite(image_key='a_b')) == ('a_b_1', '')

    def test_dangling_reference_to_renamed_key(self, keys, caplog):
        """A generated collision name does not satisfy an unrelated reference."""
        keys.add_images({'a b': b'X', 'a_b': b'Y'})
        image_key, _ = keys.repair(Sprite(image_key='a_b_1'))
        assert image_key not in ('a_b', 'a_b_1')
        assert keys.images[image_key] == FALLBACK_PNG
        assert keys.images['a_b_1'] == b'Y'
        assert len(repairs(caplog, 'InvalidReference')) == 1
