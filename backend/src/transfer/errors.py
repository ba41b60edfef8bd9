"""
Ride Tracker Transfer - Error Taxonomy
Exceptions raised by the codec layers. Only TransferService turns them
into user-facing failure reasons.
"""


class TransferError(Exception):
    """Base class for all export/import failures."""
    pass


class CompressionError(TransferError):
    """Raised when a compressed stream is malformed or truncated."""
    pass


class DecodeError(TransferError):
    """Raised when URL-safe base64 text cannot be decoded."""
    pass


class ParseError(TransferError):
    """Raised when a payload is not well-formed JSON of the expected shape."""
    pass


class SchemaError(TransferError):
    """Raised when JSON is well formed but no record carries the required fields."""
    pass


class UnrecognizedFormat(TransferError):
    """Raised when text matches none of the supported payload formats."""
    pass
