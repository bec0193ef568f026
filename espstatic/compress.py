"""
Compression and C array formatting for embedded web assets.

Assets are gzip-compressed so the firmware can send them as-is with a
`Content-Encoding: gzip` header.
"""

import gzip
import re
from typing import Tuple, Union

DEFAULT_COMPRESSLEVEL = 9
BYTES_PER_LINE = 16

_TOKEN_RE = re.compile(r"0x([0-9a-fA-F]{2})")


def compress_bytes(data: Union[str, bytes], compresslevel: int = DEFAULT_COMPRESSLEVEL) -> bytes:
    """Gzip `data` with a zeroed header timestamp so output is reproducible."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return gzip.compress(bytes(data), compresslevel=compresslevel, mtime=0)


def format_array(data: bytes) -> Tuple[str, int]:
    """Render bytes as a comma separated `0xHH` list, 16 per line.

    Every line (the first included) starts with a newline, and nothing
    follows the last byte.
    """
    parts = []
    last = len(data) - 1
    for i, byte in enumerate(data):
        if i % BYTES_PER_LINE == 0:
            parts.append("\n")
        parts.append(f"0x{byte:02x}")
        if i < last:
            parts.append(", ")
    return "".join(parts), len(data)


def parse_array(text: str) -> bytes:
    """Inverse of format_array."""
    return bytes(int(m.group(1), 16) for m in _TOKEN_RE.finditer(text))


def optimize_asset(content: Union[str, bytes], compresslevel: int = DEFAULT_COMPRESSLEVEL) -> Tuple[str, int]:
    return format_array(compress_bytes(content, compresslevel))
