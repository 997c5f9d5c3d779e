"""Deterministic zip containers for DOCX and ODT output."""

from __future__ import annotations

import zipfile
from io import BytesIO
from typing import Iterable

# Fixed entry timestamp so identical input produces identical bytes.
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def write_package(entries: Iterable[tuple[str, bytes, bool]]) -> bytes:
    """Write ``(name, data, compress)`` entries to a zip archive, in order.

    Args:
        entries: Entry name, payload, and whether to deflate it. Entries
            with ``compress=False`` are stored, as ODT requires for
            ``mimetype``.

    Returns:
        The archive bytes.
    """
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data, compress in entries:
            info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED if compress else zipfile.ZIP_STORED
            info.external_attr = 0o644 << 16
            archive.writestr(info, data)
    return buffer.getvalue()


def normalize_package(blob: bytes) -> bytes:
    """Rewrite an existing zip with fixed timestamps, keeping entry order and compression."""
    with zipfile.ZipFile(BytesIO(blob)) as source:
        entries = [
            (info.filename, source.read(info), info.compress_type != zipfile.ZIP_STORED)
            for info in source.infolist()
        ]
    return write_package(entries)
