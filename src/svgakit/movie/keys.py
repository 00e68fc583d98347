import base64
import binascii
import logging
import re
from collections.abc import Mapping
from typing import Any

from svgakit.kernel.errors import InvalidRasterData, InvalidReference

UNSAFE_KEY_CHARS = re.compile(r'[^A-Za-z0-9_\-]')

# 1x1 fully transparent RGBA PNG
FALLBACK_PNG = bytes(
    [
        137, 80, 78, 71, 13, 10, 26, 10, 0, 0, 0, 13, 73, 72, 68, 82, 0, 0, 0, 1, 0,
        0, 0, 1, 8, 6, 0, 0, 0, 31, 21, 196, 137, 0, 0, 0, 1, 115, 82, 71, 66, 0, 174,
        206, 28, 233, 0, 0, 0, 4, 103, 65, 77, 65, 0, 0, 177, 143, 11, 252, 97, 5, 0,
        0, 0, 9, 112, 72, 89, 115, 0, 0, 14, 195, 0, 0, 14, 195, 1, 199, 111, 168,
        100, 0, 0, 0, 13, 73, 68, 65, 84, 24, 87, 99, 248, 255, 255, 255, 127, 0, 9,
        251, 2, 213, 14, 19, 240, 60, 0, 0, 0, 0, 73, 69, 78, 68, 174, 66, 96, 130,
    ]
)  # fmt: skip


def sanitize_key(key: str | None) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``_``.

    Mobile players use image keys as file names.
    """
    if not key:
        return ''
    return UNSAFE_KEY_CHARS.sub('_', key)


def decode_asset(text: str) -> bytes:
    """Decode base64 asset text, tolerating data URIs and missing padding."""
    if ',' in text:
        _, text = text.split(',', 1)
    text = ''.join(text.split())
    text += '=' * (-len(text) % 4)
    return base64.b64decode(text, validate=True)


def encode_asset(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


class KeyRegistry:
    """Sanitizes asset keys and repairs sprite references to them.

    The mapping from original to sanitized key is kept injective: when two
    keys sanitize to the same name, the later one gets a numeric suffix.
    Dangling references are bound to ``FALLBACK_PNG`` instead of failing.
    """

    __slots__ = ('logger', 'mapping', 'images', '_taken', '_generated')

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger('svgakit')
        self.mapping: dict[str, str] = {}
        self.images: dict[str, bytes] = {}
        self._taken: set[str] = set()
        self._generated: set[str] = set()

    def _claim(self, key: str) -> str:
        safe_key = sanitize_key(key)
        candidate, idx = safe_key, 0
        while candidate in self._taken:
            idx += 1
            candidate = f'{safe_key}_{idx}'
        if candidate != safe_key:
            self._generated.add(candidate)
            self.logger.warning(
                f'image key {key!r} collides with another key, renamed to {candidate}',
                extra={'repair': 'KeyCollision', 'key': candidate},
            )
        self._taken.add(candidate)
        self.mapping[key] = candidate
        return candidate

    def _warn_raster(self, key: str, detail: str) -> bytes:
        self.logger.warning(
            InvalidRasterData(key, detail),
            extra={'repair': 'InvalidRasterData', 'key': key},
        )
        return FALLBACK_PNG

    def _load(self, key: str, value: Any) -> bytes | None:
        if isinstance(value, str):
            try:
                data = decode_asset(value)
            except binascii.Error as exc:
                return self._warn_raster(key, f'invalid base64 ({exc})')
            return data or self._warn_raster(key, 'empty asset')
        if isinstance(value, bytes | bytearray | memoryview):
            return bytes(value) or self._warn_raster(key, 'empty asset')
        return None

    def add_images(self, images: Mapping[str, Any] | None) -> None:
        for key, value in (images or {}).items():
            safe_key = self._claim(key)
            asset = self._load(safe_key, value)
            if asset is not None:
                self.images[safe_key] = asset

    def resolve(self, key: str | None) -> str:
        if not key:
            return ''
        if key in self.mapping:
            return self.mapping[key]
        safe_key = sanitize_key(key)
        if safe_key in self._generated:
            # a renamed asset is not a match for a dangling reference
            return self._claim(key)
        return safe_key

    def ensure(self, key: str, field: str = 'image_key') -> str:
        if key and key not in self.images:
            self.logger.warning(
                InvalidReference(key, field),
                extra={'repair': 'InvalidReference', 'key': key},
            )
            self.images[key] = FALLBACK_PNG
        return key

    def repair(self, sprite: Any) -> tuple[str, str]:
        """Resolve and back the keys of a sprite, returns ``(image, matte)``."""
        image_key = self.ensure(self.resolve(getattr(sprite, 'image_key', '')))
        matte_key = self.ensure(
            self.resolve(getattr(sprite, 'matte_key', '')),
            field='matte_key',
        )
        return image_key, matte_key
