"""Pytest configuration and shared fixtures."""

import struct
import tempfile
import zlib
from datetime import datetime
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest

TAG_DATE_TIME = 0x0132
TAG_EXIF_IFD = 0x8769
TAG_DATE_TIME_ORIGINAL = 0x9003
TAG_DATE_TIME_DIGITIZED = 0x9004

ASCII = 2
LONG = 4


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: tests that run a whole organize pass on disk")
    config.addinivalue_line("markers", "slow: tests that create many files")


def exif_text(value) -> Optional[str]:
    """Format a datetime as an EXIF date string; strings pass through."""
    if value is None or isinstance(value, str):
        return value
    return value.strftime("%Y:%m:%d %H:%M:%S")


def build_tiff_block(
    date_time=None,
    original=None,
    digitized=None,
    big_endian: bool = False,
) -> bytes:
    """
    Build a minimal TIFF-structured EXIF block.

    DateTime goes into IFD0; DateTimeOriginal and DateTimeDigitized go into
    an Exif sub-IFD referenced from IFD0.
    """
    bo = ">" if big_endian else "<"
    header = (b"MM\x00*" if big_endian else b"II*\x00") + struct.pack(bo + "I", 8)

    ifd0_fields = [(TAG_DATE_TIME, exif_text(date_time))]
    exif_fields = [
        (TAG_DATE_TIME_ORIGINAL, exif_text(original)),
        (TAG_DATE_TIME_DIGITIZED, exif_text(digitized)),
    ]
    ifd0_fields = [(tag, text) for tag, text in ifd0_fields if text is not None]
    exif_fields = [(tag, text) for tag, text in exif_fields if text is not None]

    ifd0_count = len(ifd0_fields) + (1 if exif_fields else 0)
    ifd0_offset = 8
    exif_offset = ifd0_offset + 2 + 12 * ifd0_count + 4
    exif_size = 2 + 12 * len(exif_fields) + 4 if exif_fields else 0
    data_offset = exif_offset + exif_size

    data = bytearray()

    def ascii_entry(tag: int, text: str) -> bytes:
        raw = text.encode("ascii") + b"\x00"
        if len(raw) <= 4:
            return struct.pack(bo + "HHI", tag, ASCII, len(raw)) + raw.ljust(4, b"\x00")
        offset = data_offset + len(data)
        data.extend(raw)
        if len(data) % 2:
            data.append(0)
        return struct.pack(bo + "HHII", tag, ASCII, len(raw), offset)

    ifd0 = struct.pack(bo + "H", ifd0_count)
    for tag, text in ifd0_fields:
        ifd0 += ascii_entry(tag, text)
    if exif_fields:
        ifd0 += struct.pack(bo + "HHII", TAG_EXIF_IFD, LONG, 1, exif_offset)
    ifd0 += struct.pack(bo + "I", 0)

    exif_ifd = b""
    if exif_fields:
        exif_ifd = struct.pack(bo + "H", len(exif_fields))
        for tag, text in exif_fields:
            exif_ifd += ascii_entry(tag, text)
        exif_ifd += struct.pack(bo + "I", 0)

    return header + ifd0 + exif_ifd + bytes(data)


def point_exif_ifd_at(block: bytes, offset: int) -> bytes:
    """Rewrite the IFD0 Exif pointer of a little-endian block built by build_tiff_block."""
    entry = block.index(struct.pack("<HHI", TAG_EXIF_IFD, LONG, 1))
    return block[:entry + 8] + struct.pack("<I", offset) + block[entry + 12:]


def build_jpeg(tiff_block: Optional[bytes] = None, with_jfif: bool = True) -> bytes:
    """Build a JPEG marker stream: SOI, optional APP0, optional EXIF APP1, SOS, EOI."""
    content = b"\xff\xd8"
    if with_jfif:
        jfif = b"JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        content += b"\xff\xe0" + struct.pack(">H", len(jfif) + 2) + jfif
    if tiff_block is not None:
        payload = b"Exif\x00\x00" + tiff_block
        content += b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload
    scan_header = b"\x01\x01\x00\x00\x3f\x00"
    content += b"\xff\xda" + struct.pack(">H", len(scan_header) + 2) + scan_header
    content += b"\x12\x34\x56\x78"
    content += b"\xff\xd9"
    return content


def png_chunk(chunk_type: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + chunk_type + data + struct.pack(">I", crc)


def build_png(tiff_block: Optional[bytes] = None) -> bytes:
    """Build a PNG chunk stream with an optional eXIf chunk."""
    ihdr = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)
    content = b"\x89PNG\r\n\x1a\n" + png_chunk(b"IHDR", ihdr)
    if tiff_block is not None:
        content += png_chunk(b"eXIf", tiff_block)
    content += png_chunk(b"IDAT", zlib.compress(b"\x00\x00\x00\x00"))
    content += png_chunk(b"IEND", b"")
    return content


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_tiff_block() -> Callable[..., bytes]:
    """Builder for TIFF-structured EXIF blocks."""
    return build_tiff_block


@pytest.fixture
def make_jpeg() -> Callable[..., bytes]:
    """Builder for JPEG files with an optional EXIF segment."""
    return build_jpeg


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Builder for PNG files with an optional eXIf chunk."""
    return build_png


@pytest.fixture
def write_file(temp_dir: Path) -> Callable[[str, bytes], Path]:
    """Write bytes to a path relative to temp_dir, creating parent directories."""
    def _write(relative: str, content: bytes) -> Path:
        path = temp_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _write


@pytest.fixture
def write_jpeg(write_file) -> Callable[..., Path]:
    """Write a JPEG whose EXIF holds the given dates (none gives a JPEG without EXIF)."""
    def _write(relative: str, original=None, digitized=None, date_time=None) -> Path:
        if original is None and digitized is None and date_time is None:
            return write_file(relative, build_jpeg())
        block = build_tiff_block(date_time=date_time, original=original, digitized=digitized)
        return write_file(relative, build_jpeg(block))
    return _write


@pytest.fixture
def corrupt_jpeg_bytes() -> bytes:
    """A JPEG whose APP1 segment is cut off inside its length field."""
    return b"\xff\xd8\xff\xe1\x00"


@pytest.fixture
def sample_date() -> datetime:
    return datetime(2023, 6, 15, 10, 30, 0)


@pytest.fixture
def broken_exif_pointer() -> Callable[[bytes], bytes]:
    """Point the Exif sub-IFD of a block far past its end."""
    return lambda block: point_exif_ifd_at(block, 0xFFFFFF)
