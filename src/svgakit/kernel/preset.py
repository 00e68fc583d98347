import logging
from dataclasses import dataclass, field, replace
from typing import Any, Self

from svgakit.kernel.registry import SchemaRegistry


@dataclass(frozen=True)
class _DefaultOverride:
    def __call__(self, **kwargs: Any) -> Self:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class CodecSettings:
    registry: SchemaRegistry
    root: str = 'MovieEntity'
    version: str = '2.0'
    compress_level: int = 6
    view_box: float = 800.0
    fps: int = 20
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger('svgakit'),
        compare=False,
    )

    def message(self, name: str | None = None) -> type:
        return self.registry.message(name or self.root)


@dataclass(frozen=True)
class Preset(CodecSettings, _DefaultOverride):
    pass
