"""Serve byte ranges out of a ``.pmtiles`` archive for the map view.

The map client issues HEAD and ranged GET requests; the archive is opened
read-only, the requested window is read, and only that slice is returned.
The file is never modified and never read whole into memory.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional, Tuple, Union

SCHEME = "tome-pmtiles"

# Map clients only ask for small windows; refuse anything larger so a request
# without a Range header cannot pull a multi-gigabyte file into memory.
MAX_RESPONSE_BYTES = 32 * 1024 * 1024

_NUMBER = re.compile(r"\+?[0-9]+")


class RangeError(ValueError):
    """Raised when a ``Range`` header cannot be satisfied."""


@dataclass
class Response:
    """An HTTP response produced by :func:`serve`."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def _parse_number(text: str, message: str) -> int:
    if not _NUMBER.fullmatch(text):
        raise RangeError(message)
    value = int(text)
    if value >= 2**64:
        raise RangeError(message)
    return value


def _header_text(header: Union[str, bytes]) -> str:
    if isinstance(header, bytes):
        try:
            header = header.decode("ascii")
        except UnicodeDecodeError:
            raise RangeError("Range header is not utf-8") from None
    if any(not (ch == "\t" or 32 <= ord(ch) < 127) for ch in header):
        raise RangeError("Range header is not utf-8")
    return header


def parse_range(header: Optional[Union[str, bytes]], total_len: int) -> Tuple[int, int]:
    """Parse a ``Range`` header into an inclusive ``(start, end)`` window.

    Supported forms are ``bytes=N-M``, ``bytes=N-`` and ``bytes=-N`` (the last
    N bytes). With no header the whole file is selected. Multi-range requests,
    other units and windows outside the file raise :class:`RangeError`.
    """
    if total_len == 0:
        raise RangeError("file is empty")
    if header is None:
        return 0, total_len - 1
    text = _header_text(header)
    if not text.startswith("bytes="):
        raise RangeError("Range must use bytes= unit")
    spec = text[len("bytes="):]
    if "," in spec:
        raise RangeError("multi-range not supported")
    lo, sep, hi = spec.partition("-")
    if not sep:
        raise RangeError("missing '-' in Range")

    if not lo:
        suffix = _parse_number(hi, "invalid suffix length")
        if suffix == 0:
            raise RangeError("suffix length must be > 0")
        suffix = min(suffix, total_len)
        start, end = total_len - suffix, total_len - 1
    else:
        start = _parse_number(lo, "invalid range start")
        if not hi:
            end = total_len - 1
        else:
            end = min(_parse_number(hi, "invalid range end"), total_len - 1)

    if start > end or start >= total_len:
        raise RangeError("range out of bounds")
    return start, end


def _read_from(handle: BinaryIO, start: int, length: int) -> bytes:
    handle.seek(start)
    data = handle.read(length)
    if len(data) != length:
        raise EOFError("failed to fill whole buffer")
    return data


def read_window(path: Union[str, os.PathLike], start: int, length: int) -> bytes:
    """Read exactly ``length`` bytes from ``path`` starting at ``start``.

    The file is opened read-only. Raises ``EOFError`` if it is too short.
    """
    with open(path, "rb") as handle:
        return _read_from(handle, start, length)


def _error(status: int, message: str) -> Response:
    return Response(
        status=status,
        headers={
            "Content-Type": "text/plain; charset=utf-8",
            "Access-Control-Allow-Origin": "*",
        },
        body=message.encode("utf-8"),
    )


def serve(
    path: Optional[Union[str, os.PathLike]],
    method: str,
    range_header: Optional[Union[str, bytes]] = None,
) -> Response:
    """Answer one GET or HEAD request against the archive at ``path``.

    ``path`` is the configured map source, or ``None`` if none is set.
    Failures come back as plain-text error responses, never as exceptions.
    """
    if path is None:
        return _error(404, "no map source configured")
    try:
        handle = open(path, "rb")
    except OSError as exc:
        return _error(404, f"open {os.fspath(path)}: {exc}")

    with handle:
        try:
            total_len = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            return _error(500, f"metadata: {exc}")

        if method not in ("GET", "HEAD"):
            return _error(405, "only GET and HEAD are supported")

        try:
            start, end = parse_range(range_header, total_len)
        except RangeError as exc:
            return _error(416, str(exc))
        length = end - start + 1

        if length > MAX_RESPONSE_BYTES:
            return _error(
                416, "requested range exceeds the per-request ceiling; use a smaller Range"
            )

        if method == "HEAD":
            body = b""
        else:
            try:
                body = _read_from(handle, start, length)
            except (OSError, EOFError) as exc:
                return _error(500, f"read: {exc}")

    headers = {
        "Content-Type": "application/octet-stream",
        "Accept-Ranges": "bytes",
        "Access-Control-Allow-Origin": "*",
        "Content-Length": str(length),
    }
    if range_header is not None:
        headers["Content-Range"] = f"bytes {start}-{end}/{total_len}"
    status = 206 if range_header is not None else 200
    return Response(status=status, headers=headers, body=body)