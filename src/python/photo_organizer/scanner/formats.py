"""
Container format identification.

A file's family is taken from its extension, checked against the magic
bytes at the start of the file. Content wins when the two disagree, which
catches the common case of HEIC photos exported with a ".jpg" name.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from photo_organizer.models.enums import ContainerFormat

logger = logging.getLogger(__name__)

# Enough bytes to see an ISO base media "ftyp" box and its major brand
SIGNATURE_SIZE = 16

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Byte order marker plus magic number. Plain TIFF uses 42; some RAW formats
# keep the TIFF layout but change the magic.
TIFF_SIGNATURES = (
    b"II*\x00",     # TIFF, little-endian (CR2, NEF, ARW, DNG, PEF, SRW)
    b"MM\x00*",     # TIFF, big-endian
    b"IIRO",        # Olympus ORF
    b"IIRS",        # Olympus ORF (older bodies)
    b"MMOR",        # Olympus ORF, big-endian
    b"IIU\x00",     # Panasonic RW2
)

HEIF_BRANDS = (b"heic", b"heix", b"hevc", b"hevx", b"heim", b"heis", b"mif1", b"msf1")


def sniff_format(prefix: bytes) -> Optional[ContainerFormat]:
    """
    Identify a container family from the first bytes of a file.

    Args:
        prefix: Leading bytes of the file (SIGNATURE_SIZE is enough)

    Returns:
        The detected ContainerFormat, or None if no signature matches
    """
    if prefix[:3] == b"\xff\xd8\xff":
        return ContainerFormat.JPEG

    if prefix[:4] in TIFF_SIGNATURES:
        return ContainerFormat.TIFF

    if prefix[:8] == PNG_SIGNATURE:
        return ContainerFormat.PNG

    if prefix[4:8] == b"ftyp" and prefix[8:12] in HEIF_BRANDS:
        return ContainerFormat.HEIF

    if prefix[:6] in (b"GIF87a", b"GIF89a"):
        return ContainerFormat.GENERIC
    if prefix[:4] == b"RIFF" and prefix[8:12] == b"WEBP":
        return ContainerFormat.GENERIC
    if prefix[:2] == b"BM":
        return ContainerFormat.GENERIC

    return None


def identify_format(path: Union[str, Path], prefix: bytes) -> ContainerFormat:
    """
    Classify a file as one of the supported container families.

    The extension table is consulted first. Magic-byte sniffing decides when
    the extension is missing or unknown, and overrides the extension when the
    content clearly belongs to another family. A known extension with no
    recognisable signature is trusted; extraction then reports the file as
    unreadable if it really is corrupt.

    Args:
        path: File path or name (only the extension is used)
        prefix: Leading bytes of the file

    Returns:
        The ContainerFormat; UNSUPPORTED if neither table nor signature match

    Example:
        >>> identify_format("IMG_0001.jpg", b"\\xff\\xd8\\xff\\xe1")
        <ContainerFormat.JPEG: 'jpeg'>
    """
    by_extension = ContainerFormat.from_filename(str(path))
    by_content = sniff_format(prefix)

    if by_content is None:
        return by_extension

    if by_extension not in (by_content, ContainerFormat.UNSUPPORTED):
        logger.debug(
            "%s has a %s extension but %s content",
            path, by_extension.value, by_content.value,
        )

    return by_content
