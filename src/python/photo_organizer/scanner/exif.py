"""
EXIF date extraction for photo containers.

Each container family stores its EXIF block differently:
- JPEG: APP1 marker segment ("Exif\\0\\0" + TIFF block), found by walking markers
- PNG: eXIf chunk, found by walking chunks
- TIFF and RAW formats: the file itself is the TIFF structure
- HEIC/HEIF: an Exif item inside the ISO base media boxes

JPEG and PNG blocks are located here and decoded with Pillow. TIFF-based
RAW files and HEIF files are handed to exifread, which follows their offset
tables and item locations itself.

Three fields are collected: DateTimeOriginal, DateTimeDigitized and DateTime.
A file that cannot be parsed yields an ExtractionResult with no candidates
and an error message; it never raises.
"""

import io
import logging
import struct
import threading
import warnings
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Callable, Dict, Iterable, List, Optional, Tuple

import exifread
from PIL import Image

from photo_organizer.models.enums import ContainerFormat, DateField
from photo_organizer.models.plan import CandidateDate
from photo_organizer.scanner.formats import PNG_SIGNATURE, TIFF_SIGNATURES, HEIF_BRANDS

logger = logging.getLogger(__name__)

# Encodings seen in the wild; the first is the EXIF standard
EXIF_DATE_FORMATS = (
    "%Y:%m:%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y:%m:%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
)

EXIF_IFD_POINTER = 0x8769

# Pillow reports tags by numeric id
DATE_TAG_IDS = {
    0x9003: DateField.DATE_TIME_ORIGINAL,
    0x9004: DateField.DATE_TIME_DIGITIZED,
    0x0132: DateField.DATE_TIME,
}

# exifread reports tags as "<IFD> <TagName>"; only the primary image counts
EXIFREAD_IFDS = ("Image", "EXIF")

EXIF_HEADER = b"Exif\x00\x00"

# warnings.catch_warnings swaps process-wide filters; decoders take turns
_WARNINGS_LOCK = threading.Lock()


class CorruptMetadataError(ValueError):
    """Raised when a container's structure cannot be walked."""


@dataclass(frozen=True)
class ExtractionResult:
    """
    Outcome of reading date fields from one file.

    Attributes:
        container_format: The family the file was read as
        candidates: Valid date fields in scan order
        error: Why the metadata could not be read, if it could not
    """
    container_format: ContainerFormat
    candidates: Tuple[CandidateDate, ...] = ()
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def extract_candidates(
    stream: BinaryIO,
    container_format: ContainerFormat,
    source: str = "<stream>",
) -> ExtractionResult:
    """
    Locate and decode the date fields of one file.

    Args:
        stream: Seekable binary stream over the file contents
        container_format: Family reported by the format identifier
        source: Name used in log messages

    Returns:
        ExtractionResult with the valid candidates, or with an error and no
        candidates if the container is corrupt or truncated

    Example:
        >>> with open("IMG_0001.jpg", "rb") as f:
        ...     result = extract_candidates(f, ContainerFormat.JPEG)
        >>> [c.kind for c in result.candidates]
        [<DateField.DATE_TIME: 'DateTime'>, <DateField.DATE_TIME_ORIGINAL: 'DateTimeOriginal'>]
    """
    strategy = _STRATEGIES[container_format]

    try:
        stream.seek(0)
        candidates = tuple(strategy(stream))
    except Exception as e:
        logger.warning("Failed to read date metadata from %s: %s", source, e)
        return ExtractionResult(container_format, error=str(e) or type(e).__name__)

    if not candidates and container_format.has_embedded_metadata:
        logger.debug("No date fields found in %s", source)

    return ExtractionResult(container_format, candidates)


def parse_exif_datetime(value) -> Optional[datetime]:
    """
    Parse an EXIF date field to a datetime.

    Works with plain strings, bytes and exifread tag objects. Malformed,
    blank or all-zero values ("0000:00:00 00:00:00") return None.

    Args:
        value: Raw field value

    Returns:
        datetime object or None if the value is not a plausible date
    """
    if value is None:
        return None

    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")

    text = str(value).strip().strip("\x00").strip().strip('"')
    if not text:
        return None

    for fmt in EXIF_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    logger.debug("Ignoring unparseable date value %r", text)
    return None


def _collect(fields: Iterable[Tuple[Optional[DateField], object]]) -> List[CandidateDate]:
    """Turn (field, raw value) pairs into candidates, dropping invalid dates."""
    candidates = []
    for date_field, raw in fields:
        if date_field is None:
            continue
        parsed = parse_exif_datetime(raw)
        if parsed is not None:
            candidates.append(CandidateDate(date_field, parsed))
    return candidates


# ---------------------------------------------------------------------------
# JPEG
# ---------------------------------------------------------------------------

def find_jpeg_exif_block(stream: BinaryIO) -> Optional[bytes]:
    """
    Walk JPEG marker segments until the EXIF APP1 segment.

    Scanning stops at start-of-scan: metadata segments always precede the
    entropy-coded image data.

    Returns:
        The TIFF block (without the "Exif\\0\\0" header), or None if the file
        has no EXIF segment

    Raises:
        CorruptMetadataError: If the marker structure is broken or truncated
    """
    if stream.read(2) != b"\xff\xd8":
        raise CorruptMetadataError("missing JPEG start-of-image marker")

    while True:
        lead = stream.read(1)
        if not lead:
            raise CorruptMetadataError("JPEG truncated before image data")
        if lead != b"\xff":
            raise CorruptMetadataError(f"expected JPEG marker at offset {stream.tell() - 1}")

        marker = stream.read(1)
        while marker == b"\xff":  # fill bytes
            marker = stream.read(1)
        if not marker:
            raise CorruptMetadataError("JPEG truncated inside marker")

        code = marker[0]
        if code in (0xDA, 0xD9):  # SOS, EOI
            return None
        if code == 0x01 or 0xD0 <= code <= 0xD7:  # TEM, RSTn carry no length
            continue

        length_bytes = stream.read(2)
        if len(length_bytes) < 2:
            raise CorruptMetadataError("JPEG truncated inside segment length")
        (length,) = struct.unpack(">H", length_bytes)
        if length < 2:
            raise CorruptMetadataError(f"invalid JPEG segment length {length}")

        if code == 0xE1:
            payload = stream.read(length - 2)
            if len(payload) < length - 2:
                raise CorruptMetadataError("JPEG truncated inside APP1 segment")
            if payload.startswith(EXIF_HEADER):
                return payload[len(EXIF_HEADER):]
            # XMP and other APP1 payloads
            continue

        stream.seek(length - 2, io.SEEK_CUR)


def _extract_jpeg(stream: BinaryIO) -> List[CandidateDate]:
    block = find_jpeg_exif_block(stream)
    if block is None:
        return []
    return _decode_with_pillow(block)


# ---------------------------------------------------------------------------
# PNG
# ---------------------------------------------------------------------------

def find_png_exif_block(stream: BinaryIO) -> Optional[bytes]:
    """
    Walk PNG chunks until the eXIf chunk.

    Returns:
        The chunk data (a TIFF block), or None if the file has no eXIf chunk

    Raises:
        CorruptMetadataError: If the signature is wrong or a chunk is truncated
    """
    if stream.read(len(PNG_SIGNATURE)) != PNG_SIGNATURE:
        raise CorruptMetadataError("missing PNG signature")

    while True:
        header = stream.read(8)
        if len(header) < 8:
            raise CorruptMetadataError("PNG truncated before IEND")
        length, chunk_type = struct.unpack(">I4s", header)

        if chunk_type == b"eXIf":
            data = stream.read(length)
            if len(data) < length:
                raise CorruptMetadataError("PNG truncated inside eXIf chunk")
            return data
        if chunk_type == b"IEND":
            return None

        # Chunk data plus CRC
        stream.seek(length + 4, io.SEEK_CUR)


def _extract_png(stream: BinaryIO) -> List[CandidateDate]:
    block = find_png_exif_block(stream)
    if block is None:
        return []
    return _decode_with_pillow(block)


def _decode_with_pillow(block: bytes) -> List[CandidateDate]:
    """
    Decode date fields from a TIFF-structured EXIF block using Pillow.

    IFD0 is read first, then the Exif sub-IFD, so candidates come out in
    scan order.

    Pillow reports broken offsets and short tag data as warnings and keeps
    whatever it could read. Those warnings are raised here instead, so a
    damaged block gives no candidates rather than a partial date.
    """
    with _WARNINGS_LOCK, warnings.catch_warnings():
        warnings.simplefilter("error")
        exif = Image.Exif()
        exif.load(block)

        entries = list(exif.items())
        entries.extend(exif.get_ifd(EXIF_IFD_POINTER).items())

    return _collect((DATE_TAG_IDS.get(tag), value) for tag, value in entries)


# ---------------------------------------------------------------------------
# TIFF family and HEIF (exifread)
# ---------------------------------------------------------------------------

def _check_tiff_header(stream: BinaryIO) -> None:
    header = stream.read(4)
    if header not in TIFF_SIGNATURES:
        raise CorruptMetadataError(f"invalid TIFF header {header!r}")
    stream.seek(0)


def _check_heif_header(stream: BinaryIO) -> None:
    header = stream.read(12)
    if header[4:8] != b"ftyp":
        raise CorruptMetadataError("missing ISO base media ftyp box")
    if header[8:12] not in HEIF_BRANDS:
        raise CorruptMetadataError(f"unsupported ISO base media brand {header[8:12]!r}")
    stream.seek(0)


def _decode_with_exifread(stream: BinaryIO, require_tags: bool = False) -> List[CandidateDate]:
    """
    Decode date fields with exifread.

    exifread follows TIFF offset tables and HEIF item locations on the open
    stream, so RAW files are never read in full. It returns no tags at all
    when it cannot walk the structure.

    Args:
        stream: Stream positioned at the start of the file
        require_tags: Treat an empty tag set as corruption. A TIFF file is
            its own IFD0, so it always has tags unless it is damaged.

    Raises:
        CorruptMetadataError: If require_tags is set and nothing was read
    """
    tags = exifread.process_file(stream, details=False)

    if not tags:
        if require_tags:
            raise CorruptMetadataError("no readable TIFF tags")
        return []

    fields = []
    for key, value in tags.items():
        ifd_name, _, tag_name = key.partition(" ")
        if ifd_name in EXIFREAD_IFDS:
            fields.append((DateField.from_tag_name(tag_name), value))

    return _collect(fields)


def _extract_tiff(stream: BinaryIO) -> List[CandidateDate]:
    _check_tiff_header(stream)
    return _decode_with_exifread(stream, require_tags=True)


def _extract_heif(stream: BinaryIO) -> List[CandidateDate]:
    _check_heif_header(stream)
    return _decode_with_exifread(stream)


def _no_metadata(stream: BinaryIO) -> List[CandidateDate]:
    return []


_STRATEGIES: Dict[ContainerFormat, Callable[[BinaryIO], List[CandidateDate]]] = {
    ContainerFormat.JPEG: _extract_jpeg,
    ContainerFormat.TIFF: _extract_tiff,
    ContainerFormat.HEIF: _extract_heif,
    ContainerFormat.PNG: _extract_png,
    ContainerFormat.GENERIC: _no_metadata,
    ContainerFormat.UNSUPPORTED: _no_metadata,
}
