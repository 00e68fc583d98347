class SvgaError(Exception):
    pass


class DependencyUnavailable(SvgaError):
    def __init__(self, name: str) -> None:
        super().__init__(f'required runtime is not available: {name}')
        self.name = name


class UnsupportedLegacyFormat(SvgaError):
    def __init__(self) -> None:
        super().__init__(
            'ZIP-based SVGA (v1.x) files are not supported, use SVGA 2.0 files'
        )


class MalformedContainer(SvgaError):
    def __init__(self, decompressed: bool, detail: str) -> None:
        msg = 'failed to decode SVGA protobuf structure'
        if not decompressed:
            msg += (
                ' (payload was not compressed or uses an unsupported compression,'
                ' the file might be corrupted)'
            )
        super().__init__(f'{msg}: {detail}')
        self.decompressed = decompressed
        self.detail = detail


class EncodingError(SvgaError):
    def __init__(self, detail: str) -> None:
        super().__init__(f'failed to encode SVGA document: {detail}')
        self.detail = detail


class InvalidReference(SvgaError):
    def __init__(self, key: str, field: str = 'image_key') -> None:
        super().__init__(f'fixing missing image reference in {field}: {key}')
        self.key = key
        self.field = field


class InvalidRasterData(SvgaError):
    def __init__(self, key: str | None, detail: str) -> None:
        super().__init__(
            f'substituting fallback asset for {key or "<raster>"}: {detail}'
        )
        self.key = key
        self.detail = detail
