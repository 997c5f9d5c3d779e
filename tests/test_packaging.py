"""Tests for deterministic zip packaging."""

from __future__ import annotations

import zipfile
from io import BytesIO

from wikicompiler.packaging import ZIP_EPOCH, normalize_package, write_package


class TestWritePackage:
    """Tests for write_package."""

    def test_entries_keep_order_and_compression(self) -> None:
        """Entries are written in order with the requested compression."""
        blob = write_package([("first", b"abc", False), ("dir/second.xml", b"<x/>" * 50, True)])
        with zipfile.ZipFile(BytesIO(blob)) as archive:
            infos = archive.infolist()
            assert [info.filename for info in infos] == ["first", "dir/second.xml"]
            assert infos[0].compress_type == zipfile.ZIP_STORED
            assert infos[1].compress_type == zipfile.ZIP_DEFLATED
            assert all(info.date_time == ZIP_EPOCH for info in infos)
            assert archive.read("dir/second.xml") == b"<x/>" * 50


class TestNormalizePackage:
    """Tests for normalize_package."""

    def test_timestamps_are_reset(self) -> None:
        """Archives differing only in timestamps normalize to the same bytes."""

        def build(date_time: tuple[int, int, int, int, int, int]) -> bytes:
            buffer = BytesIO()
            with zipfile.ZipFile(buffer, "w") as archive:
                info = zipfile.ZipInfo("a.txt", date_time=date_time)
                info.compress_type = zipfile.ZIP_DEFLATED
                archive.writestr(info, b"hello")
            return buffer.getvalue()

        first = build((2020, 1, 1, 0, 0, 0))
        second = build((2024, 6, 30, 12, 0, 0))
        assert first != second
        assert normalize_package(first) == normalize_package(second)

    def test_contents_preserved(self) -> None:
        """Normalizing keeps names, order, compression and data."""
        original = write_package([("m", b"type", False), ("c.xml", b"<c/>", True)])
        with zipfile.ZipFile(BytesIO(normalize_package(original))) as archive:
            assert archive.namelist() == ["m", "c.xml"]
            assert archive.getinfo("m").compress_type == zipfile.ZIP_STORED
            assert archive.read("c.xml") == b"<c/>"
