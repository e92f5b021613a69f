"""Read the bytes of a NiceGUI upload.

NiceGUI's ``ui.upload`` yields an event whose ``e.file`` is typically one of:

- **LargeFileUpload**: already written to disk; often exposes ``._path``.
- **SmallFileUpload**: in-memory; may expose async ``.read()`` or internal ``._data``.

Specimen tables are small CSVs, so the upload is read fully into memory and
handed to the table parser as bytes. No temp files are created.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from sodecal.utils.logging import get_logger

logger = get_logger(__name__)


def _as_path(value: Any) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    if isinstance(value, str) and value:
        return Path(value)
    return None


def upload_file_summary(upload_file: Any) -> str:
    """One-line description of an upload object without dumping its bytes."""
    cls = type(upload_file).__name__
    name = getattr(upload_file, "name", None)
    p = _as_path(getattr(upload_file, "_path", None))
    has_path = bool(p and p.exists())
    data = getattr(upload_file, "_data", None)
    data_len = len(data) if isinstance(data, (bytes, bytearray)) else None
    has_read = callable(getattr(upload_file, "read", None))
    return f"{cls}(name={name!r}, has_path={has_path}, data_len={data_len}, has_read={has_read})"


def upload_event_file(e: Any) -> Any:
    """The single file of an upload event (first one when a list is given).

    Older NiceGUI releases put a file-like object in `e.content` instead.

    Raises:
        RuntimeError: If the event carries no file.
    """
    f = getattr(e, "file", None)
    if f is None:
        f = getattr(e, "content", None)
    if isinstance(f, list):
        f = f[0] if f else None
    if f is None:
        raise RuntimeError("upload event has no file")
    return f


async def read_uploaded_bytes(upload_file: Any) -> bytes:
    """Return the uploaded content as bytes.

    Order:
      1) ``._path`` on disk
      2) async (or sync) ``read()``
      3) ``._data``
      4) ``content``

    Raises:
        RuntimeError: If no usable interface is available.
    """
    p = _as_path(getattr(upload_file, "_path", None))
    if p is not None and p.exists():
        return p.read_bytes()

    read = getattr(upload_file, "read", None)
    if callable(read):
        data = read()
        if hasattr(data, "__await__"):
            data = await data
        if isinstance(data, (bytes, bytearray)):
            return bytes(data)
        if isinstance(data, str):
            return data.encode("utf-8")

    for attr in ("_data", "content"):
        data = getattr(upload_file, attr, None)
        if isinstance(data, (bytes, bytearray)):
            return bytes(data)

    logger.error(f"unreadable upload: {upload_file_summary(upload_file)}")
    raise RuntimeError("upload did not provide a file path, read() or in-memory data")
