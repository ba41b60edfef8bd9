"""
Gzip compression for wire payloads.

Output is a standard gzip member at the default level, readable by any
gzip/deflate decoder (the web client uses the browser's DecompressionStream).
"""

import zlib

from transfer.errors import CompressionError

# wbits selecting the container: gzip on write; gzip or zlib (auto) on read
GZIP_WBITS = 16 + zlib.MAX_WBITS
AUTO_WBITS = 32 + zlib.MAX_WBITS
RAW_WBITS = -zlib.MAX_WBITS

# Output is produced in chunks of this size; total size is not capped
CHUNK_SIZE = 64 * 1024


def compress(data: bytes) -> bytes:
    """
    Compress bytes into a gzip stream.

    Args:
        data: Raw bytes

    Returns:
        gzip-compressed bytes

    Raises:
        CompressionError: If the compressor fails
    """
    try:
        compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, GZIP_WBITS)
        return compressor.compress(data) + compressor.flush()
    except (zlib.error, TypeError) as e:
        raise CompressionError(f"Failed to compress data: {e}")


def decompress(data: bytes) -> bytes:
    """
    Decompress a gzip, zlib or raw deflate stream.

    gzip and zlib headers are detected automatically. Headerless input falls
    back to raw deflate, which is what older app builds wrote.

    Args:
        data: Compressed bytes

    Returns:
        Decompressed bytes

    Raises:
        CompressionError: If the stream is empty, malformed or truncated
    """
    if not data:
        raise CompressionError("Failed to decompress data: empty input")

    try:
        return _inflate(data, AUTO_WBITS)
    except CompressionError:
        # No gzip/zlib header, try a bare deflate stream
        return _inflate(data, RAW_WBITS)


def _inflate(data: bytes, wbits: int) -> bytes:
    decompressor = zlib.decompressobj(wbits)
    chunks = []
    try:
        chunk = decompressor.decompress(data, CHUNK_SIZE)
        chunks.append(chunk)
        while decompressor.unconsumed_tail:
            chunks.append(decompressor.decompress(decompressor.unconsumed_tail, CHUNK_SIZE))
        chunks.append(decompressor.flush())
    except zlib.error as e:
        raise CompressionError(f"Failed to decompress data: {e}")

    if not decompressor.eof:
        raise CompressionError("Failed to decompress data: truncated stream")
    if decompressor.unused_data:
        raise CompressionError("Failed to decompress data: trailing bytes after stream end")

    return b"".join(chunks)
