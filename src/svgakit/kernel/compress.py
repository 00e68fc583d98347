import zlib

ZIP_SIGNATURE = b'PK'


def is_legacy_archive(buffer: bytes) -> bool:
    return bytes(buffer[:2]) == ZIP_SIGNATURE


def inflate(buffer: bytes) -> bytes:
    """Inflate a zlib framed stream, header and checksum included."""
    return zlib.decompress(buffer, wbits=zlib.MAX_WBITS)


def inflate_raw(buffer: bytes) -> bytes:
    """Inflate a headerless DEFLATE stream.

    The stream has to end exactly where the buffer ends, otherwise plain
    protobuf payloads could pass for a raw stream.
    """
    decomp = zlib.decompressobj(wbits=-zlib.MAX_WBITS)
    data = decomp.decompress(buffer) + decomp.flush()
    if not decomp.eof or decomp.unused_data:
        raise zlib.error('incomplete or trailing data in raw deflate stream')
    return data


def deflate(buffer: bytes, level: int = 6) -> bytes:
    return zlib.compress(buffer, level)


def unpack(buffer: bytes) -> tuple[bytes, bool]:
    """Try zlib, then raw DEFLATE, then fall back to the buffer as is.

    Returns the payload and whether one of the decompressions succeeded.
    """
    for method in (inflate, inflate_raw):
        try:
            return method(buffer), True
        except zlib.error:
            continue
    return bytes(buffer), False
